"""Common utilities for fileprint packages."""

from .config import ConfigLoader
from .logging import setup_logging, log_fields, LogContext
from .logging_config import LoggingConfig
from .errors import (
    FingerprintError, FileProcessingError, CorruptedFileError,
    ShortReadError, MediaTypeDetectionError, classify_error
)
from .checksums import Crc32, compute_crc32, compute_crc32_hex, format_checksum

__all__ = [
    'ConfigLoader',
    'LoggingConfig',
    'setup_logging',
    'log_fields',
    'LogContext',
    'FingerprintError',
    'FileProcessingError',
    'CorruptedFileError',
    'ShortReadError',
    'MediaTypeDetectionError',
    'classify_error',
    'Crc32',
    'compute_crc32',
    'compute_crc32_hex',
    'format_checksum',
]
