"""
Custom logging filters and configuration.

Provides logging utilities for keeping oracle query text readable in
logs and configuring application-wide logging behavior.
"""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# SPARQL queries are long multi-line strings; keep log lines to one screen
MAX_MESSAGE_LENGTH = 300


class QueryTextFilter(logging.Filter):
    """Collapse whitespace and truncate oversized log messages."""

    def __init__(self, max_length: int = MAX_MESSAGE_LENGTH) -> None:
        super().__init__()
        self.max_length = max_length

    def filter(self, record: logging.LogRecord) -> bool:
        """
        Rewrite the record message in place.

        Args:
            record: The log record to rewrite

        Returns:
            Always True (records are shortened, never dropped)
        """
        message = " ".join(record.getMessage().split())
        if len(message) > self.max_length:
            message = message[: self.max_length] + "..."
        record.msg = message
        record.args = None
        return True


class HttpxRequestFilter(logging.Filter):
    """Drop httpx's per-request INFO lines; oracle calls log their own summary."""

    def filter(self, record: logging.LogRecord) -> bool:
        return not (
            record.levelno == logging.INFO
            and record.getMessage().startswith("HTTP Request:")
        )


def configure_logging(level: str = "INFO") -> None:
    """
    Configure root logging for the application.

    Args:
        level: Root log level name (e.g. "INFO", "DEBUG")
    """
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler.addFilter(QueryTextFilter())

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        handlers=[handler],
        force=True,
    )
    logging.getLogger("httpx").addFilter(HttpxRequestFilter())
