"""Full-file checksum with opportunistic media type detection.

The file is read once, sequentially. The first chunk doubles as the input
for a cheap media type peek, so the costlier whole-file sniff only runs when
neither the extension table nor the peek produced an answer.
"""

import logging
import os
from pathlib import Path
from typing import Optional, Union

from fileprint.common import Crc32, classify_error, log_fields
from .config import FULL_READ_BUFFER_SIZE
from .mime_detector import DEFAULT_DETECTOR, MediaTypeDetector
from .models import FileFingerprint, FingerprintOutcome, MediaTypeSource

logger = logging.getLogger(__name__)

PathLike = Union[str, os.PathLike]


def _size_or_zero(file_path: Path) -> int:
    try:
        return file_path.stat().st_size
    except OSError:
        return 0


def run_full_fingerprint(
    file_path: PathLike,
    label: Optional[str] = None,
    detector: Optional[MediaTypeDetector] = None,
    buffer_size: int = FULL_READ_BUFFER_SIZE,
) -> FingerprintOutcome:
    """Compute checksum and media type, reporting failures in the outcome.

    Args:
        file_path: File to fingerprint
        label: Logical filename used for type detection (default: file name)
        detector: Media type collaborator (default: shared detector)
        buffer_size: Upper bound on the sequential read chunk

    Returns:
        FingerprintOutcome; on I/O failure its fingerprint has checksum None
        and whatever media type was found before the failure

    Raises:
        ValueError: If buffer_size is not positive
    """
    if buffer_size <= 0:
        raise ValueError(f"buffer_size must be positive, got {buffer_size}")

    file_path = Path(file_path)
    label = label if label is not None else file_path.name
    detector = detector or DEFAULT_DETECTOR

    media_type = detector.lookup_by_label(label)
    source = MediaTypeSource.EXTENSION if media_type else None
    media_type_failure: Optional[Exception] = None

    try:
        with open(file_path, 'rb') as f:
            size = os.fstat(f.fileno()).st_size
            chunk_size = min(buffer_size, size)
            checksum = Crc32()

            first = True
            while chunk := f.read(chunk_size):
                checksum.update(chunk)
                if first:
                    first = False
                    if media_type is None:
                        try:
                            media_type = detector.peek(chunk, label) or None
                        except Exception as e:
                            media_type_failure = e
                        if media_type:
                            source = MediaTypeSource.PEEK
    except OSError as e:
        return FingerprintOutcome(
            fingerprint=FileFingerprint(
                checksum=None,
                media_type=media_type,
                label=label,
                size_bytes=_size_or_zero(file_path),
            ),
            error=str(e),
            error_category=classify_error(e),
            media_type_source=source,
            media_type_error=str(media_type_failure) if media_type_failure else None,
            media_type_error_category=classify_error(media_type_failure) if media_type_failure else None,
        )

    if media_type is None:
        try:
            media_type = detector.detect_file(file_path) or None
        except Exception as e:
            media_type_failure = e
        if media_type:
            source = MediaTypeSource.CONTENT

    return FingerprintOutcome(
        fingerprint=FileFingerprint(
            checksum=checksum.value,
            media_type=media_type,
            label=label,
            size_bytes=size,
        ),
        media_type_source=source,
        media_type_error=str(media_type_failure) if media_type_failure else None,
        media_type_error_category=classify_error(media_type_failure) if media_type_failure else None,
    )


def compute_full_fingerprint(
    file_path: PathLike,
    label: Optional[str] = None,
    detector: Optional[MediaTypeDetector] = None,
    buffer_size: int = FULL_READ_BUFFER_SIZE,
) -> FileFingerprint:
    """Compute a whole-file fingerprint, never raising for I/O failures.

    Callers detect failure through ``fingerprint.failed`` (checksum None).
    """
    outcome = run_full_fingerprint(file_path, label=label, detector=detector, buffer_size=buffer_size)

    if outcome.media_type_error:
        logger.warning("Media type detection degraded", extra=log_fields(
            path=str(file_path),
            category=outcome.media_type_error_category,
            error=outcome.media_type_error,
        ))
    if not outcome.success:
        logger.error("Checksum failed", extra=log_fields(
            path=str(file_path),
            category=outcome.error_category,
            error=outcome.error,
        ))
    else:
        fingerprint = outcome.fingerprint
        logger.debug("Full checksum", extra=log_fields(
            path=str(file_path),
            checksum=fingerprint.checksum_hex,
            media_type=fingerprint.media_type,
            source=outcome.media_type_source.value if outcome.media_type_source else None,
            size_bytes=fingerprint.size_bytes,
        ))

    return outcome.fingerprint


def detect_media_type(
    file_path: PathLike,
    label: Optional[str] = None,
    detector: Optional[MediaTypeDetector] = None,
) -> Optional[str]:
    """Detect a file's media type without checksumming it.

    Tries the extension table, then a label-only peek, then the full content
    sniff. Returns None if the content sniff fails.
    """
    file_path = Path(file_path)
    label = label if label is not None else file_path.name
    detector = detector or DEFAULT_DETECTOR

    media_type = detector.lookup_by_label(label)
    if media_type is not None:
        return media_type

    try:
        media_type = detector.peek(None, label)
    except Exception as e:
        logger.debug("Label peek failed", extra=log_fields(label=label, error=str(e)))
    if media_type is not None:
        return media_type

    try:
        return detector.detect_file(file_path)
    except Exception as e:
        logger.error("Media type detection failed", extra=log_fields(
            path=str(file_path),
            category=classify_error(e),
            error=str(e),
        ))
        return None
