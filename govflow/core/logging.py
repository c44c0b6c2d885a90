"""Logging configuration for GovFlow services, jobs and scripts."""

import logging
import sys
from pathlib import Path
from typing import Any

import structlog
from structlog.contextvars import merge_contextvars

# Third-party loggers that drown out job progress at INFO
QUIET_LOGGERS = ("uvicorn.access", "watchfiles", "httpx", "httpcore", "aiosqlite")

_SHARED_PROCESSORS: list[Any] = [
    merge_contextvars,
    structlog.stdlib.add_logger_name,
    structlog.stdlib.add_log_level,
    structlog.processors.TimeStamper(fmt="iso", utc=True),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.format_exc_info,
    structlog.processors.UnicodeDecoder(),
]


def _formatter(renderer: Any) -> structlog.stdlib.ProcessorFormatter:
    return structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=_SHARED_PROCESSORS,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )


def setup_logging(log_level: str = "INFO", log_file: str | None = None) -> None:
    """
    Route structlog and standard library records through one processor chain.

    Services log with ``logging.getLogger(__name__)``; scripts may use
    ``get_logger``. Both end up on stderr (console renderer on a TTY, JSON
    lines otherwise) and, when ``log_file`` is set, as JSON lines in that file.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional path to a JSON log file
    """
    structlog.configure(
        processors=_SHARED_PROCESSORS + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    console_renderer = (
        structlog.dev.ConsoleRenderer() if sys.stderr.isatty() else structlog.processors.JSONRenderer()
    )
    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(_formatter(console_renderer))
    handlers: list[logging.Handler] = [stream_handler]

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(_formatter(structlog.processors.JSONRenderer()))
        handlers.append(file_handler)

    logging.basicConfig(
        format="%(message)s",
        handlers=handlers,
        level=getattr(logging, log_level.upper()),
        force=True,
    )

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Return a structlog logger bound to ``name``."""
    return structlog.get_logger(name)


class LogContext:
    """
    Bind keys (``job``, ``document_id``, ...) to every record emitted inside
    the block, including records from plain ``logging`` loggers.
    """

    def __init__(self, **kwargs: Any):
        self.context = kwargs
        self._tokens: dict[str, Any] = {}

    def __enter__(self) -> "LogContext":
        self._tokens = structlog.contextvars.bind_contextvars(**self.context)
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        structlog.contextvars.reset_contextvars(**self._tokens)
