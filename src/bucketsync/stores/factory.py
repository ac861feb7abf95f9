"""Store factory: build a store from a location string."""

from __future__ import annotations

from bucketsync.core.config import S3Config
from bucketsync.stores.base import Store
from bucketsync.stores.local import LocalStore
from bucketsync.stores.s3 import S3Store

S3_SCHEME = "s3://"


def is_s3_location(location: str) -> bool:
    """Check if a location names an S3 bucket."""
    return location.startswith(S3_SCHEME)


def parse_s3_location(location: str) -> tuple[str, str]:
    """Split an s3://bucket/prefix location.

    Returns:
        (bucket, prefix) tuple; prefix may be empty.

    Raises:
        ValueError: If the location has no bucket.
    """
    bucket, _, prefix = location[len(S3_SCHEME):].partition("/")
    if not bucket:
        raise ValueError(f"S3 location requires a bucket: {location}")
    return bucket, prefix


def open_store(
    location: str,
    s3_config: S3Config | None = None,
    missing_ok: bool = True,
) -> Store:
    """Factory function to create a store from a location.

    Args:
        location: "s3://bucket/prefix" or a local path.
        s3_config: Connection settings for S3 locations.
        missing_ok: For local stores, treat deleting a missing file as success.

    Returns:
        Configured Store instance.

    Raises:
        ValueError: If an S3 location has no bucket.
    """
    if is_s3_location(location):
        bucket, prefix = parse_s3_location(location)
        return S3Store(bucket, prefix, config=s3_config)
    return LocalStore(location, missing_ok=missing_ok)
