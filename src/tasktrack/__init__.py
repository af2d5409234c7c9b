"""tasktrack: multi-user project and task tracker.

Users register, log in, and manage projects and the tasks inside them.
Every project belongs to exactly one user; every task inherits its
owner from its project.
"""

__version__ = "0.1.0"
