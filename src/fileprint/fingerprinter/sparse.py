"""Sparse multi-point checksum for quick identity checks on large files.

Instead of reading the whole file, a fixed-size window is read at evenly
spaced positions and the windows are folded into one CRC-32. Bytes read are
bounded by ``max_windows * window_size_bytes`` no matter how big the file is.

Example with default parameters (8 KB windows, at most 20 windows, 512 KB
minimum stride):

- 100 KB file: stride 100 KB, one 8 KB window at offset 0
- 10 MB file: stride 512 KB, 20 windows
- 10 GB file: stride 512 MB, 20 windows

Consecutive windows start ``stride`` bytes apart, measured from the start of
the previous window. With a stride smaller than the window size the windows
overlap.
"""

import logging
import os
from pathlib import Path
from typing import BinaryIO, List, Optional, Tuple, Union

from fileprint.common import Crc32, ShortReadError, classify_error, log_fields
from .config import DEFAULT_SAMPLING_PARAMS, SamplingParams
from .models import UNDETERMINED, SparseChecksum, SparseOutcome

logger = logging.getLogger(__name__)

PathLike = Union[str, os.PathLike]


def compute_stride(file_size: int, params: SamplingParams = DEFAULT_SAMPLING_PARAMS) -> int:
    """
    Distance between consecutive window starts.

    Small files get a stride of the whole file (one window). Files up to
    ``max_windows * minimum_stride_bytes`` use the minimum stride. Larger
    files spread ``max_windows`` windows evenly.

    Args:
        file_size: File size in bytes
        params: Sampling parameters

    Returns:
        Stride in bytes, always at least 1
    """
    # Ceiling division. Floor division allows max_windows + 1 windows when
    # file_size % max_windows != 0 (10 MiB + 1 byte: 21 windows with stride
    # 524288 instead of 20 with stride 524289), at the cost of values that
    # differ from floor-based implementations for such sizes.
    spread = -(-file_size // params.max_windows)
    return max(1, min(params.minimum_stride_bytes, file_size), spread)


def plan_windows(file_size: int, params: SamplingParams = DEFAULT_SAMPLING_PARAMS) -> List[Tuple[int, int]]:
    """
    List the windows sampled for a file of the given size.

    Args:
        file_size: File size in bytes
        params: Sampling parameters

    Returns:
        List of (offset, expected_length) pairs; empty for an empty file
    """
    window = min(params.window_size_bytes, file_size)
    stride = compute_stride(file_size, params)

    windows = []
    position = 0
    while position < file_size:
        windows.append((position, min(window, file_size - position)))
        position += stride
    return windows


def sample_windows(
    stream: BinaryIO,
    file_size: int,
    params: SamplingParams = DEFAULT_SAMPLING_PARAMS,
    checksum: Optional[Crc32] = None,
) -> Tuple[Crc32, int, int]:
    """
    Read every planned window from a seekable stream into a checksum.

    Each read asks for a full window. Getting back anything other than the
    planned length means the file changed size after ``file_size`` was taken.

    Args:
        stream: Seekable binary stream
        file_size: Size the plan is based on
        params: Sampling parameters
        checksum: Digest to fold into (default: a fresh Crc32)

    Returns:
        Tuple of (checksum, windows_read, bytes_read)

    Raises:
        ShortReadError: If a read returns an unexpected number of bytes
        OSError: If seeking or reading fails
    """
    if checksum is None:
        checksum = Crc32()

    window = min(params.window_size_bytes, file_size)
    windows_read = 0
    bytes_read = 0

    for offset, expected in plan_windows(file_size, params):
        stream.seek(offset)
        data = stream.read(window)
        if len(data) != expected:
            raise ShortReadError(
                f"Cannot read file: actual={len(data)} window={window} expected={expected} position={offset}",
                position=offset,
                expected=expected,
                actual=len(data),
            )
        checksum.update(data)
        windows_read += 1
        bytes_read += len(data)

    return checksum, windows_read, bytes_read


def run_sparse_fingerprint(
    file_path: PathLike,
    params: Optional[SamplingParams] = None,
) -> SparseOutcome:
    """Compute a sparse checksum, reporting failures in the outcome.

    Args:
        file_path: File to sample
        params: Sampling parameters (default: DEFAULT_SAMPLING_PARAMS)

    Returns:
        SparseOutcome whose checksum is UNDETERMINED on any I/O or
        consistency failure
    """
    params = params or DEFAULT_SAMPLING_PARAMS

    try:
        with open(Path(file_path), 'rb') as f:
            file_size = os.fstat(f.fileno()).st_size
            checksum, windows_read, bytes_read = sample_windows(f, file_size, params)
    except (OSError, ShortReadError) as e:
        return SparseOutcome(
            checksum=UNDETERMINED,
            error=str(e),
            error_category=classify_error(e),
        )

    return SparseOutcome(
        checksum=SparseChecksum(checksum.value),
        windows_read=windows_read,
        bytes_read=bytes_read,
    )


def compute_sparse_fingerprint(
    file_path: PathLike,
    params: Optional[SamplingParams] = None,
) -> SparseChecksum:
    """Compute a sparse checksum, never raising for I/O failures.

    Callers detect failure by comparing against UNDETERMINED (or checking
    ``determined``).
    """
    outcome = run_sparse_fingerprint(file_path, params)

    if not outcome.success:
        logger.error("Sparse checksum undetermined", extra=log_fields(
            path=str(file_path),
            category=outcome.error_category,
            error=outcome.error,
        ))
    else:
        logger.debug("Sparse checksum", extra=log_fields(
            path=str(file_path),
            checksum=outcome.checksum.hex,
            windows=outcome.windows_read,
            bytes_read=outcome.bytes_read,
        ))

    return outcome.checksum
