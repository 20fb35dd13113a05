"""
Structured logging with structlog.

Both structlog loggers and plain stdlib loggers (uvicorn, aiosqlite) are
rendered by one `ProcessorFormatter` on stdout, as JSON lines or as console
output depending on `Settings.use_json_logs`. Request-scoped values bound
through `structlog.contextvars` (request_id, user_id) appear on every event.
"""

import logging
import sys
from typing import Any

import structlog
from structlog.types import Processor

from partsledger.config.settings import Settings, get_settings

# Third-party loggers that are too chatty at INFO
QUIET_LOGGERS = {
    "aiosqlite": logging.WARNING,
    "uvicorn.access": logging.WARNING,
}


def add_service_context(
    logger: logging.Logger, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    settings = get_settings()
    event_dict.setdefault("service", settings.app_name)
    event_dict.setdefault("service_version", settings.app_version)
    event_dict.setdefault("environment", settings.environment)
    return event_dict


def _renderer(settings: Settings) -> list[Processor]:
    if settings.use_json_logs:
        return [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(ensure_ascii=False),
        ]
    return [structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())]


def configure_logging() -> None:
    """Install structlog and the stdout handler on the root logger."""
    settings = get_settings()

    shared: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        add_service_context,
    ]

    structlog.configure(
        processors=shared + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                *_renderer(settings),
            ],
        )
    )

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(settings.log_level)

    for name, level in QUIET_LOGGERS.items():
        logging.getLogger(name).setLevel(level)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)
