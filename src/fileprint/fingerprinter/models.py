"""Fingerprint value objects."""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional

from fileprint.common.checksums import format_checksum

# -1 reinterpreted as an unsigned 64-bit integer; outside the CRC-32 range
UNDETERMINED_VALUE = 0xFFFF_FFFF_FFFF_FFFF


class MediaTypeSource(str, Enum):
    """Which detection tier produced a media type."""

    EXTENSION = 'extension'
    PEEK = 'peek'
    CONTENT = 'content'


@dataclass(frozen=True)
class FileFingerprint:
    """Whole-file checksum paired with a media type.

    A checksum of None means the file could not be read.
    """

    checksum: Optional[int]
    media_type: Optional[str]
    label: str
    size_bytes: int

    @property
    def failed(self) -> bool:
        return self.checksum is None

    @property
    def checksum_hex(self) -> Optional[str]:
        if self.checksum is None:
            return None
        return format_checksum(self.checksum)

    @property
    def filename(self) -> str:
        return self.label

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-ready mapping."""
        return {
            'checksum': self.checksum_hex,
            'media_type': self.media_type,
            'label': self.label,
            'size_bytes': self.size_bytes,
        }


@dataclass
class FingerprintDraft:
    """Mutable accumulator for patching an existing fingerprint.

    Typical use is re-checksumming a file while keeping its display label::

        draft = FingerprintDraft.from_fingerprint(old)
        draft.update_from(local_copy)
        refreshed = draft.build()

    Only ``build()`` produces a value other components may read.
    """

    checksum: Optional[int] = None
    media_type: Optional[str] = None
    label: Optional[str] = None
    size_bytes: Optional[int] = None

    @classmethod
    def from_fingerprint(cls, fingerprint: FileFingerprint) -> "FingerprintDraft":
        return cls(
            checksum=fingerprint.checksum,
            media_type=fingerprint.media_type,
            label=fingerprint.label,
            size_bytes=fingerprint.size_bytes,
        )

    def update_from(self, file_path: Path, update_label: bool = False, **kwargs: Any) -> "FingerprintDraft":
        """
        Re-fingerprint a local file and take over its checksum, type and size.

        Args:
            file_path: File to fingerprint
            update_label: Also replace the label with the file's own name
            **kwargs: Passed through to ``compute_full_fingerprint``

        Returns:
            self, so calls can be chained
        """
        from .full import compute_full_fingerprint

        fresh = compute_full_fingerprint(file_path, **kwargs)
        self.checksum = fresh.checksum
        self.media_type = fresh.media_type
        self.size_bytes = fresh.size_bytes
        if update_label:
            self.label = fresh.label
        return self

    def build(self) -> FileFingerprint:
        """
        Finalize into an immutable fingerprint.

        Raises:
            ValueError: If label or size has not been set
        """
        if self.label is None:
            raise ValueError("Cannot build fingerprint without a label")
        if self.size_bytes is None:
            raise ValueError("Cannot build fingerprint without a size")
        return FileFingerprint(
            checksum=self.checksum,
            media_type=self.media_type,
            label=self.label,
            size_bytes=self.size_bytes,
        )


@dataclass(frozen=True)
class SparseChecksum:
    """Checksum over sampled windows of a file.

    Weaker than a full checksum: equal values do not prove equal files.
    """

    value: int

    @property
    def determined(self) -> bool:
        return self.value != UNDETERMINED_VALUE

    @property
    def hex(self) -> Optional[str]:
        if not self.determined:
            return None
        return format_checksum(self.value)


UNDETERMINED = SparseChecksum(UNDETERMINED_VALUE)


@dataclass(frozen=True)
class FingerprintOutcome:
    """Result of a full fingerprint run, with the failure reason if any."""

    fingerprint: FileFingerprint
    error: Optional[str] = None
    error_category: Optional[str] = None
    media_type_source: Optional[MediaTypeSource] = None
    media_type_error: Optional[str] = None
    media_type_error_category: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class SparseOutcome:
    """Result of a sparse fingerprint run, with sampling statistics."""

    checksum: SparseChecksum
    error: Optional[str] = None
    error_category: Optional[str] = None
    windows_read: int = 0
    bytes_read: int = 0

    @property
    def success(self) -> bool:
        return self.error is None
