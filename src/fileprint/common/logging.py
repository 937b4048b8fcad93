"""Logging setup and formatters that carry per-file fields.

Fingerprinting code logs a short event and attaches the file it concerns as
structured fields::

    logger.error("Checksum failed", extra=log_fields(path=str(path), category='io'))

Text formatters render the fields as a trailing ``{'path': ..., ...}``
mapping; the JSON formatter emits them as top-level keys.
"""

import json
import logging
import logging.handlers
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from .logging_config import LoggingConfig

# Record attributes holding fields from ``extra=`` and from LogContext.
# Kept apart because logging refuses ``extra`` keys already on the record.
FIELDS_ATTR = "fileprint_fields"
CONTEXT_ATTR = "fileprint_context"

MB = 1024 * 1024


def log_fields(**fields: Any) -> Dict[str, Dict[str, Any]]:
    """Build the ``extra`` argument for a logging call."""
    return {FIELDS_ATTR: fields}


def record_fields(record: logging.LogRecord) -> Dict[str, Any]:
    """Context fields overlaid with the fields of the call itself."""
    fields = dict(getattr(record, CONTEXT_ATTR, None) or {})
    fields.update(getattr(record, FIELDS_ATTR, None) or {})
    return fields


class StructuredFormatter(logging.Formatter):
    """JSON formatter, one object per line."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "function": record.funcName,
            "line": record.lineno,
        }
        log_data.update(record_fields(record))

        if record.exc_info:
            log_data["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "traceback": self.formatException(record.exc_info),
            }

        return json.dumps(log_data, default=str)


class _FieldsFormatter(logging.Formatter):
    """Text formatter appending the record's fields to the message line."""

    def formatMessage(self, record: logging.LogRecord) -> str:
        message = super().formatMessage(record)
        fields = record_fields(record)
        if fields:
            message = f"{message} {fields!r}"
        return message


class DetailedFormatter(_FieldsFormatter):
    """Timestamped formatter with the logging call site."""

    def __init__(self) -> None:
        super().__init__(
            fmt="%(asctime)s | %(levelname)-8s | %(name)s:%(funcName)s:%(lineno)d | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )


class SimpleFormatter(_FieldsFormatter):
    """Compact console formatter."""

    def __init__(self) -> None:
        super().__init__(fmt="%(levelname)-8s | %(name)s | %(message)s")


FORMATTERS = {
    "simple": SimpleFormatter,
    "detailed": DetailedFormatter,
    "json": StructuredFormatter,
}


def setup_logging(config: LoggingConfig, level_override: Optional[str] = None) -> None:
    """Configure the root logger from the ``logging`` config section.

    Console output goes to stderr so that fingerprint records on stdout
    stay machine readable. The optional log file is always JSON.

    Args:
        config: Logging section of the configuration
        level_override: Level taken instead of ``config.level`` (e.g. from --log-level)
    """
    root_logger = logging.getLogger()
    root_logger.setLevel((level_override or config.level).upper())
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(FORMATTERS[config.format]())
    root_logger.addHandler(console_handler)

    if config.file:
        log_file = Path(config.file)
        log_file.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=config.max_file_size_mb * MB,
            backupCount=config.backup_count,
            encoding="utf-8",
        )
        file_handler.setFormatter(StructuredFormatter())
        root_logger.addHandler(file_handler)


class LogContext:
    """Attach fields (e.g. the file being fingerprinted) to every record in a block."""

    def __init__(self, logger: logging.Logger, **fields: Any) -> None:
        self.logger = logger
        self.fields = fields
        self.old_factory = None

    def __enter__(self) -> "LogContext":
        self.old_factory = logging.getLogRecordFactory()
        old_factory = self.old_factory
        fields = self.fields

        def record_factory(*args: Any, **kwargs: Any) -> logging.LogRecord:
            record = old_factory(*args, **kwargs)
            context = dict(getattr(record, CONTEXT_ATTR, None) or {})
            context.update(fields)
            setattr(record, CONTEXT_ATTR, context)
            return record

        logging.setLogRecordFactory(record_factory)
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        logging.setLogRecordFactory(self.old_factory)
