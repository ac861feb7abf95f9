"""Core module - Shared configuration, errors, checksums and chunking."""

from bucketsync.core.checksum import (
    compute_file_checksum,
    compute_stream_checksum,
)
from bucketsync.core.chunking import (
    MIN_PART_SIZE,
    Part,
    part_count,
    read_parts,
)
from bucketsync.core.config import (
    DEFAULT_PARALLEL,
    DEFAULT_PART_RETRIES,
    DEFAULT_PART_SIZE,
    VALID_ACLS,
    S3Config,
    SyncConfig,
)
from bucketsync.core.errors import (
    AbortError,
    ChecksumError,
    EnumerationError,
    SessionError,
    SyncError,
    TransferError,
)
from bucketsync.core.types import (
    CompletedPart,
    ObjectMetadata,
    SessionState,
    UploadSession,
)

__all__ = [
    # Checksum
    "compute_file_checksum",
    "compute_stream_checksum",
    # Chunking
    "MIN_PART_SIZE",
    "Part",
    "part_count",
    "read_parts",
    # Config
    "DEFAULT_PARALLEL",
    "DEFAULT_PART_RETRIES",
    "DEFAULT_PART_SIZE",
    "VALID_ACLS",
    "S3Config",
    "SyncConfig",
    # Errors
    "AbortError",
    "ChecksumError",
    "EnumerationError",
    "SessionError",
    "SyncError",
    "TransferError",
    # Types
    "CompletedPart",
    "ObjectMetadata",
    "SessionState",
    "UploadSession",
]
