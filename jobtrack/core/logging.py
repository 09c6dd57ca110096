"""
Structured logging configuration using structlog.

In development (app_env=dev): colored console output.
Everywhere else: JSON lines with timestamp, level, logger name and every
bound context var (request_id, user_id).

Modules keep using the stdlib API and still get structured output:

    import logging
    logger = logging.getLogger(__name__)
    logger.info("stage appended")

Code that wants key/value events (the stage audit trail) uses structlog
directly:

    import structlog
    structlog.get_logger("jobtrack.audit").info("stage_event", action="add_stage")

Per-request context is bound by the HTTP middleware in jobtrack.main via
bind_request_context().
"""

import logging
import sys
from typing import Optional

import structlog


def configure_logging(app_env: str = "dev") -> None:
    """
    Configure structlog with a stdlib bridge so all loggers (including
    uvicorn, sqlalchemy, etc.) produce structured output.

    Args:
        app_env: Application environment. "dev" -> ConsoleRenderer; anything else -> JSONRenderer.
    """
    shared_processors: list = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]

    if app_env == "dev":
        renderer = structlog.dev.ConsoleRenderer()
    else:
        renderer = structlog.processors.JSONRenderer()

    structlog.configure(
        processors=shared_processors
        + [
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processor=renderer,
        foreign_pre_chain=shared_processors,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers = []
    root_logger.addHandler(handler)
    root_logger.setLevel(logging.INFO)

    # Suppress noisy third-party loggers outside development
    if app_env != "dev":
        logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


def bind_request_context(request_id: str, user_id: Optional[str] = None) -> None:
    """Reset the per-request context vars and bind the new request's ids."""
    structlog.contextvars.clear_contextvars()
    if user_id:
        structlog.contextvars.bind_contextvars(request_id=request_id, user_id=user_id)
    else:
        structlog.contextvars.bind_contextvars(request_id=request_id)
