"""Logging setup for Gatekeeper.

Two loggers are configured: the package logger ``gatekeeper`` for service
messages, and ``gatekeeper.audit`` which receives one line per activity
record from :class:`gatekeeper.core.audit.LoggingAuditSink`. Audit lines
carry the record under ``extra={"activity": ...}``; :class:`ActivityFormatter`
renders it as ``key=value`` pairs so the lines stay greppable.

With file logging on, service messages go to ``gatekeeper.log`` and audit
lines additionally go to their own ``audit.log``.
"""

import logging
import logging.handlers
import os
from typing import Any, Dict, Mapping, Optional

PACKAGE_LOGGER = "gatekeeper"
AUDIT_LOGGER = "gatekeeper.audit"

LOG_FORMAT = "%(asctime)s [%(levelname)s] [%(name)s] %(message)s"
DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"
LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

# Marks handlers installed here so reconfiguring replaces them
_HANDLER_TAG = "_gatekeeper_handler"


def parse_level(level: str) -> int:
    """Turn a level name into its numeric value."""
    level_upper = str(level).upper()
    if level_upper not in LEVELS:
        raise ValueError(f"Invalid log level: {level}. Must be one of: {', '.join(LEVELS)}")
    return getattr(logging, level_upper)


def _reference(value: Optional[Mapping[str, Any]]) -> Optional[str]:
    if not value:
        return None
    return f"{value.get('type')}:{value.get('id')}"


def activity_fields(activity: Mapping[str, Any]) -> Dict[str, Any]:
    """Flatten a dumped activity record into the pairs shown on a log line."""
    fields = {
        "type": activity.get("type"),
        "actor": _reference(activity.get("actor")),
        "resource": activity.get("resource"),
        "object": _reference(activity.get("object")),
        "target": _reference(activity.get("target")),
        "took": activity.get("took"),
    }
    return {k: v for k, v in fields.items() if v is not None}


class ActivityFormatter(logging.Formatter):
    """Formatter that appends the ``activity`` extra as ``key=value`` pairs."""

    def __init__(self, fmt: str = LOG_FORMAT, datefmt: str = DATE_FORMAT):
        super().__init__(fmt, datefmt=datefmt)

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        activity = getattr(record, "activity", None)
        if isinstance(activity, Mapping):
            pairs = " ".join(f"{k}={v}" for k, v in activity_fields(activity).items())
            if pairs:
                line = f"{line} | {pairs}"
        return line


def _tagged(handler: logging.Handler, formatter: logging.Formatter) -> logging.Handler:
    handler.setFormatter(formatter)
    setattr(handler, _HANDLER_TAG, True)
    return handler


def _reset(logger: logging.Logger) -> None:
    for handler in [h for h in logger.handlers if getattr(h, _HANDLER_TAG, False)]:
        logger.removeHandler(handler)
        handler.close()


def _file_handler(path: str, max_bytes: int, backup_count: int, formatter: logging.Formatter) -> logging.Handler:
    return _tagged(
        logging.handlers.RotatingFileHandler(path, maxBytes=max_bytes, backupCount=backup_count),
        formatter,
    )


def configure_logging(
    level: str = "INFO",
    log_dir: str = "./logs",
    file_logging: bool = False,
    console_logging: bool = True,
    max_bytes: int = 10485760,  # 10MB
    backup_count: int = 5,
) -> logging.Logger:
    """Configure the package and audit loggers.

    Safe to call repeatedly: handlers installed by an earlier call are
    closed and replaced, so several apps in one process never duplicate
    lines. The audit logger keeps propagating to the package logger, so
    audit lines also reach the console and ``gatekeeper.log``.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_dir: Directory for log files
        file_logging: Enable rotating file logging
        console_logging: Enable console logging
        max_bytes: Maximum log file size before rotation
        backup_count: Number of backup log files to keep

    Returns:
        The package logger
    """
    numeric_level = parse_level(level)
    formatter = ActivityFormatter()

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    audit_logger = logging.getLogger(AUDIT_LOGGER)
    _reset(package_logger)
    _reset(audit_logger)

    package_logger.setLevel(numeric_level)
    # Activity records are logged at INFO; a stricter package level still keeps them
    audit_logger.setLevel(min(numeric_level, logging.INFO))

    if file_logging:
        os.makedirs(log_dir, exist_ok=True)
        package_logger.addHandler(
            _file_handler(os.path.join(log_dir, f"{PACKAGE_LOGGER}.log"), max_bytes, backup_count, formatter)
        )
        audit_logger.addHandler(
            _file_handler(os.path.join(log_dir, "audit.log"), max_bytes, backup_count, formatter)
        )

    if console_logging:
        package_logger.addHandler(_tagged(logging.StreamHandler(), formatter))

    return package_logger


def configure_from_settings(settings) -> logging.Logger:
    """Configure logging from a Settings instance."""
    return configure_logging(
        level=settings.log_level,
        log_dir=settings.log_dir,
        file_logging=settings.log_to_file,
    )
