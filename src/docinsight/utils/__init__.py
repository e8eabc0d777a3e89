"""Shared utilities — structlog setup."""

from docinsight.utils.logging import configure_logging, get_logger

__all__ = ["configure_logging", "get_logger"]
