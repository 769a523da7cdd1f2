import logging
import sys
from uuid import UUID

import structlog


def configure_logging(log_level: str = "INFO", *, json_output: bool = True) -> None:
    timestamper = structlog.processors.TimeStamper(fmt="iso", utc=True)
    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer(colors=False)
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level.upper(), logging.INFO),
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.processors.format_exc_info,
            timestamper,
            renderer,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def configure_logging_from_settings() -> None:
    from rankvote.core.config import get_settings

    settings = get_settings()
    configure_logging(settings.log_level, json_output=settings.app_env != "dev")


def bind_tournament_context(tournament_id: UUID) -> None:
    structlog.contextvars.bind_contextvars(tournament_id=str(tournament_id))


def clear_tournament_context() -> None:
    structlog.contextvars.unbind_contextvars("tournament_id")
