"""Logging setup shared by the API, the engine and the management CLI.

Each entrypoint calls ``configure_logging`` once with its own prefix. The
prefix names the log files and is stamped on every record as ``service``.
Production and staging render JSON lines; other environments get the
structlog console renderer.
"""

import logging
import logging.handlers
import os
import sys
from pathlib import Path

import structlog

_QUIET_LOGGERS = ("httpx", "httpcore", "asyncio", "protean", "uvicorn.access")
_MAX_BYTES = 10 * 1024 * 1024
_BACKUPS = 5


def current_environment() -> str:
    return (os.getenv("ENV") or os.getenv("PROTEAN_ENV") or "development").lower()


def log_level_for(environment: str) -> str:
    """LOG_LEVEL wins; otherwise DEBUG in development, WARNING under test, INFO elsewhere."""
    defaults = {"development": "DEBUG", "test": "WARNING"}
    return os.getenv("LOG_LEVEL", defaults.get(environment, "INFO")).upper()


def _rotating(path: Path, level) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(path, maxBytes=_MAX_BYTES, backupCount=_BACKUPS, encoding="utf-8")
    handler.setLevel(level)
    return handler


def _stdlib_handlers(log_dir: Path, prefix: str, level: str) -> list[logging.Handler]:
    console = logging.StreamHandler(sys.stdout)
    console.setLevel(level)

    log_dir.mkdir(parents=True, exist_ok=True)
    return [
        console,
        _rotating(log_dir / f"{prefix}.log", level),
        # Failed deliveries and handler crashes, kept apart for on-call
        _rotating(log_dir / f"{prefix}_error.log", logging.ERROR),
    ]


def _service_tagger(service: str):
    def tag(_, __, event_dict):
        event_dict.setdefault("service", service)
        return event_dict

    return tag


def configure_logging(log_dir: str | Path = "logs", log_file_prefix: str = "notifications") -> None:
    environment = current_environment()
    level = log_level_for(environment)

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers = _stdlib_handlers(Path(log_dir), log_file_prefix, level)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        _service_tagger(log_file_prefix),
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
    ]
    if environment in ("production", "staging"):
        processors += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        processors.append(structlog.dev.ConsoleRenderer(exception_formatter=structlog.dev.plain_traceback))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def bind_request(**values) -> None:
    """Attach request-scoped values (path, caller) to every log line until cleared."""
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(**{k: v for k, v in values.items() if v is not None})


def clear_request() -> None:
    structlog.contextvars.clear_contextvars()
