"""Media type detection using filetype library (pure Python, cross-platform).

Three tiers, from cheapest to costliest:

- ``lookup_by_label``: extension table, no I/O
- ``peek``: magic bytes of a buffer the caller already holds, then the
  label's suffix as known to filetype, then a text heuristic
- ``detect_file``: opens the file and sniffs its header
"""

import codecs
import mimetypes
from pathlib import Path, PurePath
from typing import Mapping, Optional

import filetype

from fileprint.common import MediaTypeDetectionError
from .config import MediaTypeConfig

OCTET_STREAM = 'application/octet-stream'
TEXT_PLAIN = 'text/plain'

# Leading bytes inspected by the text heuristic
TEXT_PROBE_SIZE = 8192

# Control characters that do not occur in ordinary text files
_BINARY_CONTROL_BYTES = bytes(b for b in range(0x20) if b not in b"\t\n\r\f\b\x1b")


def builtin_extension_table() -> dict[str, str]:
    """Return the standard library's built-in suffix table.

    A fresh ``MimeTypes`` instance only holds the built-in defaults, so the
    result does not depend on the host's mime.types files.
    """
    return dict(mimetypes.MimeTypes().types_map[True])


def looks_like_text(data: bytes) -> bool:
    """
    Heuristic check for UTF-8 (or ASCII) text.

    A multi-byte sequence cut off at the end of the buffer is tolerated,
    since callers pass arbitrary chunks.

    Args:
        data: Leading bytes of a file

    Returns:
        True if the bytes decode as UTF-8 without unexpected control bytes
    """
    if not data:
        return False
    if len(data.translate(None, _BINARY_CONTROL_BYTES)) != len(data):
        return False
    decoder = codecs.getincrementaldecoder('utf-8')()
    try:
        decoder.decode(data, final=False)
    except UnicodeDecodeError:
        return False
    return True


class MediaTypeDetector:
    """Content-sniffing collaborator used by the fingerprinters.

    Stateless after construction; safe to share between threads.
    """

    def __init__(self, extension_table: Optional[Mapping[str, str]] = None) -> None:
        """
        Args:
            extension_table: Suffix (with leading dot) to media type mapping.
                Defaults to the standard library's built-in table.
        """
        if extension_table is None:
            extension_table = builtin_extension_table()
        self._extensions = {k.lower(): v for k, v in extension_table.items()}

    @classmethod
    def from_config(cls, config: MediaTypeConfig) -> "MediaTypeDetector":
        table = builtin_extension_table() if config.use_builtin_table else {}
        table.update(config.extension_overrides)
        return cls(extension_table=table)

    def lookup_by_label(self, label: Optional[str]) -> Optional[str]:
        """Look up a media type from the label's extension. No I/O."""
        if not label:
            return None
        suffix = PurePath(label).suffix.lower()
        if not suffix:
            return None
        return self._extensions.get(suffix)

    def peek(self, data: Optional[bytes], label: Optional[str]) -> Optional[str]:
        """
        Guess a media type from a buffer already in memory and the label.

        Args:
            data: First chunk of the file, or None for a label-only probe
            label: Logical filename

        Returns:
            Media type, or None if nothing conclusive was found
        """
        if data:
            kind = filetype.guess(bytes(data))
            if kind is not None:
                return kind.mime

        if label:
            suffix = PurePath(label).suffix.lstrip('.').lower()
            if suffix:
                kind = filetype.get_type(ext=suffix)
                if kind is not None:
                    return kind.mime

        if data and looks_like_text(data[:TEXT_PROBE_SIZE]):
            return TEXT_PLAIN

        return None

    def detect_file(self, file_path: Path) -> str:
        """
        Detect media type of a file by reading its magic bytes.

        Args:
            file_path: Path to the file

        Returns:
            Media type string (e.g., 'image/jpeg', 'text/plain').
            Returns 'application/octet-stream' if type cannot be determined

        Raises:
            MediaTypeDetectionError: If the file cannot be read; the
                underlying OSError is chained as ``__cause__``
        """
        try:
            kind = filetype.guess(str(file_path))
            if kind is not None:
                return kind.mime

            with open(file_path, 'rb') as f:
                head = f.read(TEXT_PROBE_SIZE)
        except OSError as e:
            raise MediaTypeDetectionError(
                f"Cannot sniff file: {e}",
                path=str(file_path),
                reason=type(e).__name__,
            ) from e

        if looks_like_text(head):
            return TEXT_PLAIN

        return OCTET_STREAM


DEFAULT_DETECTOR = MediaTypeDetector()
