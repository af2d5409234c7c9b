"""Authentication.

Users → email/password → bcrypt-verified → signed JWT (7 days by default).
Every protected route resolves the Bearer token to a CurrentIdentity
(user_id + email) which the services use for ownership scoping.
"""
