"""Content fingerprints used to detect changed objects.

This module provides:
- new_hasher: Digest factory shared by every store
- compute_stream_checksum: Digest of a readable byte stream
- compute_file_checksum: Digest of a local file
"""

import hashlib
from pathlib import Path
from typing import BinaryIO

READ_BLOCK_SIZE = 1024 * 1024  # 1 MB


def new_hasher() -> "hashlib._Hash":
    """Create a fresh MD5 hasher.

    MD5 matches the ETag S3 reports for single-part objects, which lets
    remote digests be read from listings without downloading.
    """
    return hashlib.md5(usedforsecurity=False)


def compute_stream_checksum(stream: BinaryIO) -> str:
    """Compute the hex digest of everything left in a stream.

    Args:
        stream: Readable binary stream, consumed to EOF.

    Returns:
        Lowercase hexadecimal MD5 digest.
    """
    hasher = new_hasher()
    for block in iter(lambda: stream.read(READ_BLOCK_SIZE), b""):
        hasher.update(block)
    return hasher.hexdigest()


def compute_file_checksum(path: Path) -> str:
    """Compute the hex digest of a file.

    Reads the file in blocks to handle large files efficiently.

    Args:
        path: Path to the file to hash.

    Returns:
        Lowercase hexadecimal MD5 digest.
    """
    with open(path, "rb") as f:
        return compute_stream_checksum(f)
