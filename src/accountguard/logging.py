"""Centralized logging configuration for accountguard.

Every handler installed by ``setup_logging`` passes records through
``RedactingFilter``, so bearer tokens, password digests and reset tokens
never reach the log file even if a caller formats them into a message.
"""

from __future__ import annotations

import logging
import os
import re
from logging.handlers import RotatingFileHandler
from pathlib import Path

DEFAULT_LOG_DIR = "logs"
DEFAULT_LOG_FILE = "accountguard.log"
DEFAULT_MAX_BYTES = 10 * 1024 * 1024  # 10MB
DEFAULT_BACKUP_COUNT = 5
DEFAULT_LOG_LEVEL = "INFO"

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

ROOT_LOGGER = "accountguard"

_SENSITIVE_PATTERNS = [
    (re.compile(r"Bearer [a-zA-Z0-9._-]+"), "Bearer [REDACTED]"),
    (re.compile(r"\$2[aby]\$\d{2}\$[./A-Za-z0-9]{53}"), "[BCRYPT_DIGEST]"),
    (re.compile(r"(reset_token|token|password|secret)=[^\s&]+"), r"\1=[REDACTED]"),
    (re.compile(r"eyJ[a-zA-Z0-9_-]+\.[a-zA-Z0-9_-]+\.[a-zA-Z0-9_-]+"), "[JWT]"),
]


def sanitize_for_log(text: str) -> str:
    """Remove sensitive data from log output.

    Args:
        text: Text that may contain bearer tokens, password digests or secrets.

    Returns:
        Sanitized text safe for logging.
    """
    result = text
    for pattern, replacement in _SENSITIVE_PATTERNS:
        result = pattern.sub(replacement, result)
    return result


def mask_email(email: str) -> str:
    """Shorten an email address for log lines.

    Keeps the first character of the local part and the full domain,
    e.g. ``alice@example.com`` becomes ``a***@example.com``.
    """
    local, sep, domain = email.partition("@")
    if not sep:
        return "***"
    return f"{local[:1]}***@{domain}"


class RedactingFilter(logging.Filter):
    """Rewrites each record's message through ``sanitize_for_log``."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.msg = sanitize_for_log(record.getMessage())
        record.args = None
        return True


def _handler(handler: logging.Handler, level: int) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    handler.addFilter(RedactingFilter())
    return handler


def setup_logging(
    log_dir: str | Path | None = None,
    log_file: str = DEFAULT_LOG_FILE,
    max_bytes: int = DEFAULT_MAX_BYTES,
    backup_count: int = DEFAULT_BACKUP_COUNT,
    level: str | None = None,
    console: bool = True,
) -> logging.Logger:
    """Set up the accountguard logger with a rotating file handler.

    Args:
        log_dir: Directory for log files. Defaults to ``ACCOUNTGUARD_LOG_DIR``
                 or 'logs' in the current directory.
        log_file: Log file name.
        max_bytes: Maximum size per log file before rotation.
        backup_count: Number of rotated files to keep.
        level: Log level name. Defaults to ``ACCOUNTGUARD_LOG_LEVEL`` or INFO.
        console: Whether to also log to stderr.

    Returns:
        The root accountguard logger. Calling this again replaces its handlers.
    """
    log_path = Path(log_dir or os.environ.get("ACCOUNTGUARD_LOG_DIR", DEFAULT_LOG_DIR))
    log_path.mkdir(parents=True, exist_ok=True)
    level_name = (level or os.environ.get("ACCOUNTGUARD_LOG_LEVEL", DEFAULT_LOG_LEVEL)).upper()
    log_level = getattr(logging, level_name, logging.INFO)

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(log_level)
    for old in list(logger.handlers):
        old.close()
        logger.removeHandler(old)

    log_file_path = log_path / log_file
    logger.addHandler(
        _handler(
            RotatingFileHandler(
                log_file_path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
            ),
            log_level,
        )
    )
    if console:
        logger.addHandler(_handler(logging.StreamHandler(), log_level))

    logger.info("accountguard logging initialized (level=%s, file=%s)", level_name, log_file_path)
    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a component logger under the accountguard root logger.

    Args:
        name: Component name, e.g. 'security'. Prefixed with 'accountguard.'
              unless it already is.
    """
    if not name.startswith(f"{ROOT_LOGGER}."):
        name = f"{ROOT_LOGGER}.{name}"
    return logging.getLogger(name)
