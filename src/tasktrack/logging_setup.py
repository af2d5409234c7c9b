"""structlog configuration.

Log lines are event-style names with key/value context
(``logger.info("project.created", project_id=..., user_id=...)``).
RequestIdMiddleware binds ``request_id`` into contextvars, and
merge_contextvars folds it into every line logged during that request.
"""

import logging
from typing import Optional

import structlog

from tasktrack.config import settings


def configure_logging(
    level: Optional[str] = None, json_output: Optional[bool] = None
) -> None:
    """Configure structlog and the stdlib root logger. Safe to call twice."""
    level_name = (level or settings.log_level).upper()
    use_json = settings.log_json if json_output is None else json_output
    log_level = getattr(logging, level_name, logging.INFO)

    logging.basicConfig(format="%(message)s", level=log_level)

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
    ]
    if use_json:
        # ConsoleRenderer pretty-prints exc_info itself
        processors += [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        cache_logger_on_first_use=True,
    )
