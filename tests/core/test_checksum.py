"""Tests for content checksums."""

import hashlib
import io
from pathlib import Path

from bucketsync.core.checksum import (
    compute_file_checksum,
    compute_stream_checksum,
    new_hasher,
)


class TestChecksum:
    """Tests for MD5 content digests."""

    def test_stream_checksum_is_md5(self) -> None:
        """Digest should equal the MD5 of the bytes."""
        data = b"hello world"
        assert compute_stream_checksum(io.BytesIO(data)) == hashlib.md5(data).hexdigest()

    def test_file_checksum(self, tmp_path: Path) -> None:
        """File digest should equal the stream digest."""
        data = b"x" * (3 * 1024 * 1024 + 17)
        path = tmp_path / "big.bin"
        path.write_bytes(data)
        assert compute_file_checksum(path) == hashlib.md5(data).hexdigest()

    def test_equal_content_equal_digest(self) -> None:
        """Equal bytes give equal digests."""
        assert compute_stream_checksum(io.BytesIO(b"abc")) == compute_stream_checksum(
            io.BytesIO(b"abc")
        )

    def test_different_content_different_digest(self) -> None:
        """Different bytes give different digests."""
        assert compute_stream_checksum(io.BytesIO(b"abc")) != compute_stream_checksum(
            io.BytesIO(b"abd")
        )

    def test_empty_digest(self) -> None:
        """The empty digest is the MD5 of no bytes."""
        assert new_hasher().hexdigest() == "d41d8cd98f00b204e9800998ecf8427e"
