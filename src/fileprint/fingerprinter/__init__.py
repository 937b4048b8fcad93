"""Full and sparse file fingerprinting."""

from .config import (
    FingerprinterConfig, SamplingParams, DEFAULT_SAMPLING_PARAMS, FULL_READ_BUFFER_SIZE
)
from .models import (
    FileFingerprint, FingerprintDraft, SparseChecksum, UNDETERMINED,
    FingerprintOutcome, SparseOutcome, MediaTypeSource
)
from .mime_detector import MediaTypeDetector
from .full import compute_full_fingerprint, run_full_fingerprint, detect_media_type
from .sparse import compute_sparse_fingerprint, run_sparse_fingerprint

__version__ = "0.1.0"

__all__ = [
    'FingerprinterConfig',
    'SamplingParams',
    'DEFAULT_SAMPLING_PARAMS',
    'FULL_READ_BUFFER_SIZE',
    'FileFingerprint',
    'FingerprintDraft',
    'SparseChecksum',
    'UNDETERMINED',
    'FingerprintOutcome',
    'SparseOutcome',
    'MediaTypeSource',
    'MediaTypeDetector',
    'compute_full_fingerprint',
    'run_full_fingerprint',
    'detect_media_type',
    'compute_sparse_fingerprint',
    'run_sparse_fingerprint',
]
