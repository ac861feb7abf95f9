"""Tests for core configuration classes."""

from __future__ import annotations

import pytest

from bucketsync.core.config import (
    DEFAULT_PARALLEL,
    DEFAULT_PART_RETRIES,
    DEFAULT_PART_SIZE,
    VALID_ACLS,
    S3Config,
    SyncConfig,
)


class TestSyncConfig:
    """Tests for SyncConfig class."""

    def test_defaults(self) -> None:
        """Should default to the documented limits."""
        config = SyncConfig()
        assert config.parallel == DEFAULT_PARALLEL == 32
        assert config.part_size == DEFAULT_PART_SIZE == 6_000_000
        assert config.part_retries == DEFAULT_PART_RETRIES == 2
        assert config.dry_run is False
        assert config.ignore_errors is False
        assert config.delete_extraneous is False

    def test_rejects_zero_parallel(self) -> None:
        """Should reject parallel below 1."""
        with pytest.raises(ValueError, match="parallel"):
            SyncConfig(parallel=0)

    def test_rejects_zero_part_size(self) -> None:
        """Should reject a non-positive part size."""
        with pytest.raises(ValueError, match="part_size"):
            SyncConfig(part_size=0)

    def test_rejects_negative_retries(self) -> None:
        """Should reject negative retries."""
        with pytest.raises(ValueError, match="part_retries"):
            SyncConfig(part_retries=-1)

    def test_zero_retries_allowed(self) -> None:
        """Zero retries means a single attempt per part."""
        assert SyncConfig(part_retries=0).part_retries == 0


class TestS3Config:
    """Tests for S3Config class."""

    def test_defaults(self) -> None:
        """Should default to us-east-1 on AWS."""
        config = S3Config()
        assert config.region == "us-east-1"
        assert config.endpoint_url is None
        assert config.acl is None

    def test_endpoint_trailing_slash_removed(self) -> None:
        """Should strip trailing slash from the endpoint."""
        config = S3Config(endpoint_url="https://s3.example.com/")
        assert config.endpoint_url == "https://s3.example.com"

    def test_is_secure_https(self) -> None:
        """Should return True for HTTPS endpoints."""
        assert S3Config(endpoint_url="https://s3.example.com").is_secure is True

    def test_is_secure_http(self) -> None:
        """Should return False for HTTP endpoints."""
        assert S3Config(endpoint_url="http://localhost:9000").is_secure is False

    def test_is_secure_default_endpoint(self) -> None:
        """AWS endpoints are always HTTPS."""
        assert S3Config().is_secure is True

    @pytest.mark.parametrize("acl", VALID_ACLS)
    def test_accepts_canned_acls(self, acl: str) -> None:
        """Should accept every canned ACL."""
        assert S3Config(acl=acl).acl == acl

    def test_rejects_unknown_acl(self) -> None:
        """Should list the allowed values for an unknown ACL."""
        with pytest.raises(ValueError, match="acl should be one of: private"):
            S3Config(acl="everyone")
