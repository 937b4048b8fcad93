"""Checksum utilities for file identity and integrity checks."""

import zlib
from pathlib import Path
from typing import Optional, Union

# Constants for checksum calculation
CRC32_CHUNK_SIZE = 65536  # 64 KB chunks
CRC32_MASK = 0xFFFFFFFF

BytesLike = Union[bytes, bytearray, memoryview]


class Crc32:
    """Rolling CRC-32 digest.

    Accumulates state across ``update`` calls and knows nothing about files,
    so the same primitive serves both sequential and sampled reads.
    """

    __slots__ = ('_crc',)

    def __init__(self) -> None:
        self._crc = 0

    def update(self, data: BytesLike, offset: int = 0, length: Optional[int] = None) -> "Crc32":
        """
        Fold ``length`` bytes of ``data`` starting at ``offset`` into the digest.

        Args:
            data: Buffer to read from
            offset: Start position inside the buffer
            length: Number of bytes to fold (default: rest of the buffer)

        Returns:
            self, so calls can be chained

        Raises:
            ValueError: If the slice falls outside the buffer
        """
        view = memoryview(data)
        if length is None:
            length = len(view) - offset
        if offset < 0 or length < 0 or offset + length > len(view):
            raise ValueError(
                f"Slice out of range: offset={offset}, length={length}, buffer={len(view)}"
            )
        self._crc = zlib.crc32(view[offset:offset + length], self._crc)
        return self

    @property
    def value(self) -> int:
        """Current digest as an unsigned integer."""
        return self._crc & CRC32_MASK

    def hexdigest(self) -> str:
        return format_checksum(self.value)

    def __repr__(self) -> str:
        return f"Crc32({self.hexdigest()})"


def format_checksum(value: int) -> str:
    """Render a checksum as lowercase hex, zero padded to 8 characters.

    Unpadded renderings (``ab`` rather than ``000000ab``) do not compare equal
    as strings; compare parsed integers when matching against those.
    """
    return f"{value:08x}"


def compute_crc32(file_path: Path) -> int:
    """
    Compute CRC32 checksum of entire file.

    Args:
        file_path: Path to the file

    Returns:
        CRC32 checksum as unsigned 32-bit integer

    Raises:
        OSError: If file cannot be read
    """
    checksum = Crc32()

    with open(file_path, 'rb') as f:
        while chunk := f.read(CRC32_CHUNK_SIZE):
            checksum.update(chunk)

    return checksum.value


def compute_crc32_hex(file_path: Path) -> str:
    """
    Compute CRC32 checksum of entire file as hex string.

    Args:
        file_path: Path to the file

    Returns:
        CRC32 checksum as 8-character hex string (e.g., "a1b2c3d4")

    Raises:
        OSError: If file cannot be read
    """
    return format_checksum(compute_crc32(file_path))
