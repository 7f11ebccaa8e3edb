# Overview: Log-injection protection for records that carry user-controlled text.

from __future__ import annotations

import logging

MAX_LOG_LENGTH = 1000
TRUNCATION_MARKER = "...[truncated]"

_ESCAPES = {
    "\r\n": "\\r\\n",
    "\r": "\\r",
    "\n": "\\n",
    "\t": "\\t",
    "\x00": "\\0",
    "\x1b": "\\x1b",
}

# Attributes every LogRecord carries; anything else came in through extra=
_STANDARD_ATTRS = set(vars(logging.LogRecord("", 0, "", 0, "", None, None)).keys()) | {
    "message",
    "asctime",
}


def sanitize_log_input(value) -> str:
    """
    Escape line breaks and control characters, then truncate.

    Names, addresses and search terms end up in log lines; without escaping
    a crafted value could forge additional log entries.
    """
    if value is None:
        return ""
    text = value if isinstance(value, str) else str(value)
    for raw, escaped in _ESCAPES.items():
        text = text.replace(raw, escaped)
    if len(text) > MAX_LOG_LENGTH:
        text = text[:MAX_LOG_LENGTH] + TRUNCATION_MARKER
    return text


class SanitizingFilter(logging.Filter):
    """Renders the record message once, sanitized, and scrubs extra= values."""

    def filter(self, record: logging.LogRecord) -> bool:
        try:
            message = record.getMessage()
        except (TypeError, ValueError):
            message = str(record.msg)
        record.msg = sanitize_log_input(message)
        record.args = None

        for key, value in list(vars(record).items()):
            if key in _STANDARD_ATTRS:
                continue
            if isinstance(value, str):
                setattr(record, key, sanitize_log_input(value))
        return True


def install(logger: logging.Logger, level: str = "INFO") -> None:
    """Attach the filter to the logger and every handler it owns."""
    logger.setLevel(level)
    sanitizer = SanitizingFilter()
    if not any(isinstance(f, SanitizingFilter) for f in logger.filters):
        logger.addFilter(sanitizer)
    for handler in logger.handlers:
        if not any(isinstance(f, SanitizingFilter) for f in handler.filters):
            handler.addFilter(sanitizer)
