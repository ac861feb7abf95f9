"""Tests for the S3 store using moto mock."""

from __future__ import annotations

import hashlib
from collections.abc import Iterator
from pathlib import Path
from typing import Any

import pytest

from bucketsync.core.chunking import MIN_PART_SIZE
from bucketsync.core.config import S3Config, SyncConfig
from bucketsync.stores.local import LocalStore
from bucketsync.stores.s3 import CHECKSUM_METADATA_KEY, S3Object, S3Store, normalize_prefix
from bucketsync.sync import MultipartUploader, SyncEngine
from tests.fakes import MemoryObject


@pytest.fixture
def s3_client() -> Iterator[Any]:
    """Set up moto mock for S3 and return a client with two buckets."""
    pytest.importorskip("moto")
    import boto3
    from moto import mock_aws

    with mock_aws():
        client = boto3.client("s3", region_name="us-east-1")
        client.create_bucket(Bucket="test-bucket")
        client.create_bucket(Bucket="other-bucket")
        yield client


def listed(store: S3Store) -> dict[str, S3Object]:
    listing = store.files()
    objects = {o.relative_path: o for o in listing}
    listing.result().raise_for_error()
    return objects


class TestNormalizePrefix:
    """Tests for normalize_prefix."""

    def test_empty(self) -> None:
        """An empty prefix stays empty."""
        assert normalize_prefix("") == ""

    def test_adds_trailing_slash(self) -> None:
        """Prefixes are normalized to directory form."""
        assert normalize_prefix("a/b") == "a/b/"
        assert normalize_prefix("/a/b/") == "a/b/"


class TestS3Store:
    """Tests for S3Store against a mocked bucket."""

    def test_requires_bucket(self, s3_client: Any) -> None:
        """A bucket name is mandatory."""
        with pytest.raises(ValueError):
            S3Store("", client=s3_client)

    def test_location(self, s3_client: Any) -> None:
        """Location is an s3:// URL."""
        store = S3Store("test-bucket", "photos", client=s3_client)
        assert store.location == "s3://test-bucket/photos/"

    def test_lists_below_prefix(self, s3_client: Any) -> None:
        """Only keys below the prefix are listed, relative to it."""
        s3_client.put_object(Bucket="test-bucket", Key="photos/a.jpg", Body=b"aa")
        s3_client.put_object(Bucket="test-bucket", Key="photos/sub/b.jpg", Body=b"b")
        s3_client.put_object(Bucket="test-bucket", Key="music/c.mp3", Body=b"c")

        objects = listed(S3Store("test-bucket", "photos", client=s3_client))

        assert sorted(objects) == ["a.jpg", "sub/b.jpg"]
        assert objects["a.jpg"].size == 2
        assert objects["a.jpg"].key == "photos/a.jpg"

    def test_lists_directory_markers(self, s3_client: Any) -> None:
        """Empty keys ending in / are directory markers."""
        s3_client.put_object(Bucket="test-bucket", Key="empty/", Body=b"")
        objects = listed(S3Store("test-bucket", client=s3_client))
        assert objects["empty/"].is_directory

    def test_missing_bucket_reports_enumeration_error(self, s3_client: Any) -> None:
        """A listing failure is reported by the listing result."""
        store = S3Store("no-such-bucket", client=s3_client)
        listing = store.files()
        assert list(listing) == []
        assert not listing.result().ok

    def test_checksum_from_etag(self, s3_client: Any) -> None:
        """Single-part objects take their digest from the ETag."""
        s3_client.put_object(Bucket="test-bucket", Key="f", Body=b"hello")
        obj = listed(S3Store("test-bucket", client=s3_client))["f"]
        assert obj.checksum() == hashlib.md5(b"hello").hexdigest()

    def test_checksum_from_metadata(self, s3_client: Any) -> None:
        """A non-MD5 ETag falls back to the recorded checksum metadata."""
        obj = S3Object(s3_client, "test-bucket", "f", "f", 5, etag='"abc-2"')
        s3_client.put_object(
            Bucket="test-bucket",
            Key="f",
            Body=b"hello",
            Metadata={CHECKSUM_METADATA_KEY: "0" * 32},
        )
        assert obj.checksum() == "0" * 32

    def test_checksum_by_reading(self, s3_client: Any) -> None:
        """Without ETag or metadata the object is read."""
        s3_client.put_object(Bucket="test-bucket", Key="f", Body=b"hello")
        obj = S3Object(s3_client, "test-bucket", "f", "f", 5, etag="")
        assert obj.checksum() == hashlib.md5(b"hello").hexdigest()

    def test_create_records_metadata(self, s3_client: Any) -> None:
        """create() stores content type and checksum metadata."""
        store = S3Store("test-bucket", "dst", client=s3_client)
        store.create(MemoryObject("index.html", b"<html/>"))

        head = s3_client.head_object(Bucket="test-bucket", Key="dst/index.html")
        assert head["ContentType"] == "text/html"
        assert head["Metadata"][CHECKSUM_METADATA_KEY] == hashlib.md5(b"<html/>").hexdigest()
        body = s3_client.get_object(Bucket="test-bucket", Key="dst/index.html")["Body"].read()
        assert body == b"<html/>"

    def test_create_unknown_type(self, s3_client: Any) -> None:
        """Unknown extensions get the binary content type."""
        store = S3Store("test-bucket", client=s3_client)
        store.create(MemoryObject("blob.zzz-unknown", b"x"))
        head = s3_client.head_object(Bucket="test-bucket", Key="blob.zzz-unknown")
        assert head["ContentType"] == "application/binary"

    def test_create_directory_marker(self, s3_client: Any) -> None:
        """A directory marker becomes an empty key ending in /."""
        store = S3Store("test-bucket", client=s3_client)
        store.create(MemoryObject("d/", is_directory=True))
        head = s3_client.head_object(Bucket="test-bucket", Key="d/")
        assert head["ContentLength"] == 0

    def test_server_side_copy_preserves_metadata(self, s3_client: Any) -> None:
        """S3 to S3 copies keep content type and storage class."""
        s3_client.put_object(
            Bucket="test-bucket",
            Key="src/report.bin",
            Body=b"data",
            ContentType="application/x-report",
            StorageClass="STANDARD_IA",
        )
        source = listed(S3Store("test-bucket", "src", client=s3_client))["report.bin"]

        S3Store("other-bucket", "dst", client=s3_client).create(source)

        head = s3_client.head_object(Bucket="other-bucket", Key="dst/report.bin")
        assert head["ContentType"] == "application/x-report"
        assert head["StorageClass"] == "STANDARD_IA"
        assert head["Metadata"][CHECKSUM_METADATA_KEY] == hashlib.md5(b"data").hexdigest()

    def test_acl_applied(self, s3_client: Any) -> None:
        """A configured canned ACL is sent with writes."""
        store = S3Store("test-bucket", config=S3Config(acl="public-read"), client=s3_client)
        store.create(MemoryObject("public.txt", b"x"))
        grants = s3_client.get_object_acl(Bucket="test-bucket", Key="public.txt")["Grants"]
        assert any(
            g["Grantee"].get("URI", "").endswith("AllUsers") for g in grants
        )

    def test_delete(self, s3_client: Any) -> None:
        """delete() removes the key; missing keys are not an error."""
        s3_client.put_object(Bucket="test-bucket", Key="p/f", Body=b"x")
        store = S3Store("test-bucket", "p", client=s3_client)
        store.delete("f")
        store.delete("f")
        assert listed(store) == {}


class TestS3Multipart:
    """Tests for multipart uploads to S3."""

    def test_min_part_size(self, s3_client: Any) -> None:
        """The uploader raises small part sizes to the S3 floor."""
        store = S3Store("test-bucket", client=s3_client)
        uploader = MultipartUploader(store, part_size=1024, initial_backoff=0)
        assert uploader.part_size == MIN_PART_SIZE

    def test_round_trip(self, s3_client: Any) -> None:
        """A multipart upload assembles the source bytes."""
        data = bytes(range(256)) * (11 * 1024 * 1024 // 256)
        store = S3Store("test-bucket", "big", client=s3_client)
        uploader = MultipartUploader(store, part_size=MIN_PART_SIZE, initial_backoff=0)

        session = uploader.upload(MemoryObject("blob.bin", data))

        assert [p.part_number for p in session.parts] == [1, 2, 3]
        body = s3_client.get_object(Bucket="test-bucket", Key="big/blob.bin")["Body"].read()
        assert body == data

        obj = listed(store)["blob.bin"]
        assert obj.checksum() == hashlib.md5(data).hexdigest()

    def test_sync_local_to_s3_is_idempotent(self, s3_client: Any, tmp_path: Path) -> None:
        """A second sync of unchanged multipart objects skips them."""
        (tmp_path / "large.bin").write_bytes(b"z" * (MIN_PART_SIZE + 10))
        (tmp_path / "small.txt").write_bytes(b"small")
        dest = S3Store("test-bucket", "mirror", client=s3_client)
        engine = SyncEngine(SyncConfig(part_size=MIN_PART_SIZE, retry_backoff=0, parallel=2))

        first = engine.sync(LocalStore(tmp_path), dest)
        assert first.tally() == {"applied": 2, "skipped": 0, "failed": 0}

        second = engine.sync(LocalStore(tmp_path), dest)
        assert second.tally() == {"applied": 0, "skipped": 2, "failed": 0}
