# -*- coding: utf-8 -*-
"""
NativeHub Logging Module
Lightweight module-level logging with token redaction.

Messages are redacted before they reach the ``nativehub`` logger so that
OAuth tokens never end up in a console or log file.
"""

import logging
import re

LOGGER_NAME = "nativehub"

_logger = logging.getLogger(LOGGER_NAME)


def _redact_sensitive(message):
    """
    Redact potentially sensitive data from log messages.

    Patterns removed:
    - OAuth access tokens (ghp_*, gho_*, ghu_* formats used by GitHub)
    - GitHub Personal Access Tokens (github_pat_* format)
    - JSON keys containing "access_token", "refresh_token" or "token"

    Args:
        message: Log message string

    Returns:
        Redacted message string with sensitive data replaced
    """
    if not message:
        return message

    msg = str(message)

    msg = re.sub(r"gh[pousr]_[a-zA-Z0-9_]+", "[REDACTED_ACCESS_TOKEN]", msg)

    msg = re.sub(r"github_pat_[a-zA-Z0-9_]+", "[REDACTED_PAT]", msg)

    msg = re.sub(
        r'("refresh_token"\s*:\s*)"([^"]*)"',
        r'\1"[REDACTED_REFRESH_TOKEN]"',
        msg,
        flags=re.IGNORECASE,
    )

    msg = re.sub(
        r'("access_token"\s*:\s*)"([^"]*)"',
        r'\1"[REDACTED_ACCESS_TOKEN]"',
        msg,
        flags=re.IGNORECASE,
    )

    msg = re.sub(
        r'"token"\s*:\s*"([a-zA-Z0-9_\-\.]+)"',
        r'"token": "[REDACTED_TOKEN]"',
        msg,
        flags=re.IGNORECASE,
    )

    # Authorization header values, in case a header dict gets formatted
    msg = re.sub(
        r"(Bearer\s+)[a-zA-Z0-9_\-\.]+",
        r"\1[REDACTED_TOKEN]",
        msg,
    )

    return msg


def configure(level="INFO"):
    """
    Install a stream handler on the nativehub logger (once).

    Args:
        level: Level name or number (e.g. "DEBUG")
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    _logger.setLevel(level)
    if not any(getattr(h, "_nativehub", False) for h in _logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(
            logging.Formatter("[NativeHub] %(levelname)s: %(message)s")
        )
        handler._nativehub = True
        _logger.addHandler(handler)


def info(message):
    """Log an informational message."""
    _logger.info(_redact_sensitive(str(message)))


def warning(message):
    """Log a warning message."""
    _logger.warning(_redact_sensitive(str(message)))


def error(message, exc_info=False):
    """
    Log an error message

    Args:
        message: Error message to log
        exc_info: Attach the current exception traceback
    """
    _logger.error(_redact_sensitive(str(message)), exc_info=exc_info)


def debug(message):
    """Log a debug message."""
    _logger.debug(_redact_sensitive(str(message)))
