"""Base error definitions for fileprint packages."""

from typing import Any, Dict


class FingerprintError(Exception):
    """Base exception for all fileprint errors."""

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context: Dict[str, Any] = context


class FileProcessingError(FingerprintError):
    """Base exception for file processing errors."""
    pass


class CorruptedFileError(FileProcessingError):
    """File is corrupted or changed while it was being read."""
    pass


class ShortReadError(CorruptedFileError):
    """A sampled read returned a different byte count than the file size predicted."""
    pass


class MediaTypeDetectionError(FileProcessingError):
    """Content sniffing could not read the file."""
    pass


def classify_error(exception: BaseException) -> str:
    """
    Classify an exception into an error category.

    Args:
        exception: The exception to classify

    Returns:
        Error category string: 'permission', 'corrupted', 'not_found',
        'io', 'media_type', or 'unknown'
    """
    if isinstance(exception, CorruptedFileError):
        return 'corrupted'
    elif isinstance(exception, MediaTypeDetectionError):
        return 'media_type'
    elif isinstance(exception, PermissionError):
        return 'permission'
    elif isinstance(exception, FileNotFoundError):
        return 'not_found'
    elif isinstance(exception, OSError):
        return 'io'
    else:
        return 'unknown'
