"""Core utilities and configurations."""

from govflow.core.config import Settings, get_settings
from govflow.core.logging import LogContext, get_logger, setup_logging

__all__ = [
    "Settings",
    "get_settings",
    "setup_logging",
    "get_logger",
    "LogContext",
]
