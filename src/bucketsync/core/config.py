"""Shared configuration classes for bucketsync.

This module defines the configuration accepted by the sync core and the
connection settings used to reach an S3-compatible endpoint.
"""

from __future__ import annotations

from dataclasses import dataclass

DEFAULT_PARALLEL = 32
DEFAULT_PART_SIZE = 6_000_000  # bytes, must stay above the S3 5 MiB floor
DEFAULT_PART_RETRIES = 2
DEFAULT_RETRY_BACKOFF = 1.0  # seconds
DEFAULT_REGION = "us-east-1"

VALID_ACLS = (
    "private",
    "public-read",
    "public-read-write",
    "authenticated-read",
    "bucket-owner-read",
    "bucket-owner-full-control",
    "log-delivery-write",
)


@dataclass
class SyncConfig:
    """Policy for one sync run.

    Attributes:
        parallel: Maximum number of actions in flight.
        dry_run: Log actions without performing any I/O.
        ignore_errors: Keep going after a failed action.
        delete_extraneous: Delete destination objects missing from the source.
        part_size: Multipart threshold and part size in bytes.
        part_retries: Retries per part after the first attempt.
        retry_backoff: Initial delay between part retries in seconds.
    """

    parallel: int = DEFAULT_PARALLEL
    dry_run: bool = False
    ignore_errors: bool = False
    delete_extraneous: bool = False
    part_size: int = DEFAULT_PART_SIZE
    part_retries: int = DEFAULT_PART_RETRIES
    retry_backoff: float = DEFAULT_RETRY_BACKOFF

    def __post_init__(self) -> None:
        """Validate limits."""
        if self.parallel < 1:
            raise ValueError(f"parallel must be at least 1, got {self.parallel}")
        if self.part_size < 1:
            raise ValueError(f"part_size must be positive, got {self.part_size}")
        if self.part_retries < 0:
            raise ValueError(
                f"part_retries cannot be negative, got {self.part_retries}"
            )


@dataclass
class S3Config:
    """Connection settings for an S3-compatible endpoint.

    Credentials are resolved by boto3 from the environment or the shared
    AWS configuration files.

    Attributes:
        region: AWS region name.
        endpoint_url: Custom endpoint URL (MinIO, OVH, ...), None for AWS.
        acl: Canned ACL applied to created objects, None for bucket default.
    """

    region: str = DEFAULT_REGION
    endpoint_url: str | None = None
    acl: str | None = None

    def __post_init__(self) -> None:
        """Normalize endpoint and validate the ACL."""
        if self.endpoint_url is not None:
            self.endpoint_url = self.endpoint_url.rstrip("/") or None
        if self.acl is not None and self.acl not in VALID_ACLS:
            raise ValueError(
                f"acl should be one of: {', '.join(VALID_ACLS)}"
            )

    @property
    def is_secure(self) -> bool:
        """Check if the endpoint uses HTTPS.

        Returns:
            True unless a plain http:// endpoint was configured.
        """
        return not (self.endpoint_url or "").startswith("http://")
