"""Configuration models for the fingerprinter."""

from pydantic import BaseModel, Field, ConfigDict, field_validator
from fileprint.common import LoggingConfig

KB = 1024

# 512 KB sequential reads amortize syscall overhead while bounding peak memory
FULL_READ_BUFFER_SIZE = 512 * KB


class SamplingParams(BaseModel):
    """Sparse sampling parameters.

    Frozen so one instance can be shared read-only between concurrent calls.
    """

    model_config = ConfigDict(extra='forbid', frozen=True)

    window_size_bytes: int = Field(
        default=8 * KB,
        gt=0,
        description="Bytes read at each sampled position (4 KB sector size, 8 KB chosen)"
    )
    max_windows: int = Field(
        default=20,
        gt=0,
        description="Upper bound on the number of sampled windows"
    )
    minimum_stride_bytes: int = Field(
        default=512 * KB,
        gt=0,
        description="Smallest distance between window starts for files larger than this"
    )


DEFAULT_SAMPLING_PARAMS = SamplingParams()


class FullScanConfig(BaseModel):
    """Full-file checksum configuration."""

    model_config = ConfigDict(extra='forbid')

    buffer_size_bytes: int = Field(
        default=FULL_READ_BUFFER_SIZE,
        gt=0,
        description="Sequential read chunk size (capped at the file size)"
    )


class MediaTypeConfig(BaseModel):
    """Extension table configuration for media type lookup."""

    model_config = ConfigDict(extra='forbid')

    use_builtin_table: bool = Field(
        default=True,
        description="Seed the extension table with the standard library's built-in mappings"
    )
    extension_overrides: dict[str, str] = Field(
        default_factory=dict,
        description="Extra suffix to media type mappings, e.g. {'.heic' = 'image/heic'}"
    )

    @field_validator('extension_overrides', mode='after')
    @classmethod
    def normalize_suffixes(cls, v: dict[str, str]) -> dict[str, str]:
        """Lowercase suffixes and make sure each starts with a dot."""
        normalized = {}
        for suffix, media_type in v.items():
            suffix = suffix.lower()
            if not suffix.startswith('.'):
                suffix = '.' + suffix
            normalized[suffix] = media_type
        return normalized


class FingerprinterConfig(BaseModel):
    """Root configuration for the fingerprinter."""

    model_config = ConfigDict(extra='forbid')

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    full: FullScanConfig = Field(default_factory=FullScanConfig)
    sampling: SamplingParams = Field(default_factory=SamplingParams)
    media_types: MediaTypeConfig = Field(default_factory=MediaTypeConfig)
