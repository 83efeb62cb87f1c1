# simple_reviews/security.py
"""
Error types, input sanitization and event logging for Simple Reviews.
Handles: structured exceptions, text-field sanitizing, colored/file logging
"""

import logging
import os
import re
import sys
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from typing import Any, Dict, Optional


logger = logging.getLogger("simple_reviews")


# ============================================================================
# CUSTOM EXCEPTIONS
# ============================================================================

class ReviewsException(Exception):
    """Base exception carrying a machine-readable error code"""

    status_code = 400

    def __init__(self, message: str, error_code: str, details: Dict = None):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)


class InvalidArgumentException(ReviewsException):
    """Raised when a request argument is missing or empty"""
    status_code = 400


class NotFoundException(ReviewsException):
    """Raised when a record or shortcode does not exist"""
    status_code = 404


# ============================================================================
# INPUT SANITIZATION
# ============================================================================

class InputValidator:
    """Text sanitizing that matches the host's plain text-field rules"""

    SCRIPT_STYLE_PATTERN = re.compile(r"<(script|style)[^>]*?>.*?</\1>", re.IGNORECASE | re.DOTALL)
    TAG_PATTERN = re.compile(r"<[^>]*>")
    WHITESPACE_PATTERN = re.compile(r"[\r\n\t ]+")
    OCTET_PATTERN = re.compile(r"%[a-f0-9]{2}", re.IGNORECASE)

    @classmethod
    def sanitize_text_field(cls, value: Any) -> str:
        """
        Strip markup, control characters, line breaks and percent-encoded
        octets from a single-line text value.
        """
        if value is None or isinstance(value, (list, dict, tuple, set)):
            return ""
        if isinstance(value, bytes):
            value = value.decode("utf-8", errors="replace")
        elif isinstance(value, bool):
            value = "1" if value else ""
        elif not isinstance(value, str):
            value = str(value)

        text = value
        if "<" in text:
            text = cls.SCRIPT_STYLE_PATTERN.sub("", text)
            text = cls.TAG_PATTERN.sub("", text)
            text = text.replace("<", "&lt;")

        text = cls.WHITESPACE_PATTERN.sub(" ", text)
        text = "".join(char for char in text if char.isprintable())
        text = text.strip()

        found_octets = False
        while cls.OCTET_PATTERN.search(text):
            text = cls.OCTET_PATTERN.sub("", text)
            found_octets = True

        if found_octets:
            text = re.sub(r" +", " ", text).strip()

        return text


def sanitize_text_field(value: Any) -> str:
    """Sanitize a text field"""
    return InputValidator.sanitize_text_field(value)


# ============================================================================
# TIME
# ============================================================================

def utc_now() -> datetime:
    """Current UTC time as a naive datetime, for DateTime columns"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


# ============================================================================
# LOGGING
# ============================================================================

class ConsoleFormatter(logging.Formatter):
    """Console formatter that colors the level name"""

    LEVEL_COLORS = {
        "DEBUG": "\033[2m",
        "INFO": "\033[36m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[1;31m",
    }

    def __init__(self, fmt=None, datefmt=None, use_color: bool = True):
        super().__init__(fmt=fmt, datefmt=datefmt)
        self.use_color = use_color

    def formatMessage(self, record):
        color = self.LEVEL_COLORS.get(record.levelname) if self.use_color else None
        if not color:
            return super().formatMessage(record)
        plain_level = record.levelname
        record.levelname = f"{color}{plain_level}\033[0m"
        try:
            return super().formatMessage(record)
        finally:
            record.levelname = plain_level


def setup_logging(
    level: str = "INFO",
    log_dir: Optional[str] = None,
    log_filename: str = "simple_reviews.log",
    fmt: str = "%(asctime)s %(name)s %(levelname)s %(message)s",
    datefmt: str = "%Y-%m-%d %H:%M:%S",
    max_bytes: int = 10 * 1024 * 1024,
    backup_count: int = 3,
) -> logging.Logger:
    """
    Configure the package logger with a colored console handler and,
    when log_dir is given, a rotating plain-text file handler.
    """
    logger.setLevel(level)

    while logger.handlers:
        logger.handlers.pop()

    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(ConsoleFormatter(fmt=fmt, datefmt=datefmt, use_color=sys.stdout.isatty()))
    logger.addHandler(console)

    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        path = os.path.join(log_dir, log_filename)
        file_handler = RotatingFileHandler(path, maxBytes=max_bytes, backupCount=backup_count)
        file_handler.setFormatter(logging.Formatter(fmt=fmt, datefmt=datefmt))
        logger.addHandler(file_handler)

    return logger


class EventLogger:
    """Structured application event logging"""

    SEVERITY_LEVELS = {
        "critical": logging.CRITICAL,
        "high": logging.ERROR,
        "medium": logging.WARNING,
        "low": logging.INFO,
        "info": logging.INFO,
        "debug": logging.DEBUG,
    }

    @classmethod
    def log_event(cls, event_type: str, data: Dict[str, Any]):
        """Log an event with its severity and payload"""
        severity = data.get("severity", "info")
        log_entry = {
            "timestamp": utc_timestamp(),
            "event_type": event_type,
            "severity": severity,
            "data": data,
        }
        level = cls.SEVERITY_LEVELS.get(severity, logging.INFO)
        logger.log(level, "[%s] %s: %s", event_type, severity.upper(), log_entry)


def log_event(event_type: str, data: Dict[str, Any]):
    """Log application event"""
    EventLogger.log_event(event_type, data)


__all__ = [
    'ReviewsException',
    'InvalidArgumentException',
    'NotFoundException',
    'InputValidator',
    'sanitize_text_field',
    'setup_logging',
    'log_event',
    'utc_now',
    'utc_timestamp',
    'logger',
]
