"""S3-compatible object store (AWS, MinIO, OVH, ...).

Keys are mapped to relative paths by stripping the store prefix. Objects
ending in "/" with size 0 are directory markers.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from typing import Any, BinaryIO

from bucketsync.core.checksum import compute_stream_checksum
from bucketsync.core.chunking import MIN_PART_SIZE
from bucketsync.core.config import S3Config
from bucketsync.core.types import CompletedPart, ObjectMetadata, UploadSession
from bucketsync.stores.base import (
    DIRECTORY_SEPARATOR,
    MultipartStore,
    StoreObject,
    guess_content_type,
)

logger = logging.getLogger(__name__)

CHECKSUM_METADATA_KEY = "md5_checksum"
MAX_COPY_SIZE = 5 * 1024 * 1024 * 1024  # copy_object limit: 5 GiB


def create_s3_client(config: S3Config) -> Any:
    """Create a boto3 S3 client from connection settings."""
    import boto3

    return boto3.client(
        "s3",
        endpoint_url=config.endpoint_url,
        region_name=config.region,
        use_ssl=config.is_secure,
    )


def normalize_prefix(prefix: str) -> str:
    """Normalize a key prefix to directory form ("" or "a/b/")."""
    prefix = prefix.lstrip(DIRECTORY_SEPARATOR)
    if prefix and not prefix.endswith(DIRECTORY_SEPARATOR):
        prefix += DIRECTORY_SEPARATOR
    return prefix


class S3Object(StoreObject):
    """An object listed from an S3 bucket."""

    backend = "s3"

    def __init__(
        self,
        client: Any,
        bucket: str,
        key: str,
        relative_path: str,
        size: int,
        etag: str = "",
        storage_class: str | None = None,
        endpoint_url: str | None = None,
    ) -> None:
        is_directory = key.endswith(DIRECTORY_SEPARATOR) and size == 0
        super().__init__(relative_path, size, is_directory)
        self._client = client
        self._bucket = bucket
        self._key = key
        self._etag = etag.strip('"')
        self._storage_class = storage_class
        self._endpoint_url = endpoint_url
        self._head: dict[str, Any] | None = None

    @property
    def bucket(self) -> str:
        """Return the bucket name."""
        return self._bucket

    @property
    def key(self) -> str:
        """Return the full object key."""
        return self._key

    @property
    def endpoint_url(self) -> str | None:
        """Return the endpoint the object was listed from."""
        return self._endpoint_url

    def head(self) -> dict[str, Any]:
        """Fetch (once) the object's headers."""
        if self._head is None:
            self._head = self._client.head_object(Bucket=self._bucket, Key=self._key)
        return self._head

    def metadata(self) -> ObjectMetadata:
        """Return the content type and storage class stored on the object."""
        head = self.head()
        return ObjectMetadata(
            content_type=head.get("ContentType"),
            storage_class=head.get("StorageClass") or self._storage_class,
            checksum=head.get("Metadata", {}).get(CHECKSUM_METADATA_KEY),
        )

    def open(self) -> BinaryIO:
        """Stream the object body."""
        response = self._client.get_object(Bucket=self._bucket, Key=self._key)
        body: BinaryIO = response["Body"]
        return body

    def _compute_checksum(self) -> str:
        # Single-part ETags are the MD5 of the content
        if self._etag and "-" not in self._etag and len(self._etag) == 32:
            return self._etag.lower()

        recorded = self.head().get("Metadata", {}).get(CHECKSUM_METADATA_KEY)
        if recorded:
            return str(recorded).lower()

        logger.debug(f"No usable digest for s3://{self._bucket}/{self._key}, reading it")
        with self.open() as body:
            return compute_stream_checksum(body)

    def __str__(self) -> str:
        return f"s3://{self._bucket}/{self._key}"


class S3Store(MultipartStore):
    """Store rooted at a bucket and key prefix."""

    backend = "s3"
    min_part_size = MIN_PART_SIZE

    def __init__(
        self,
        bucket: str,
        prefix: str = "",
        config: S3Config | None = None,
        client: Any = None,
    ) -> None:
        """Initialize S3 store.

        Args:
            bucket: S3 bucket name.
            prefix: Key prefix acting as the store root.
            config: Connection settings (region, endpoint, ACL).
            client: Pre-built boto3 S3 client; created from config if None.
        """
        if not bucket:
            raise ValueError("S3 store requires a bucket")
        self._bucket = bucket
        self._prefix = normalize_prefix(prefix)
        self._config = config or S3Config()
        self._client: Any = client or create_s3_client(self._config)

    @property
    def location(self) -> str:
        """Return the S3 bucket location."""
        return f"s3://{self._bucket}/{self._prefix}"

    @property
    def bucket(self) -> str:
        """Return the bucket name."""
        return self._bucket

    @property
    def prefix(self) -> str:
        """Return the normalized key prefix."""
        return self._prefix

    def _key(self, relative_path: str) -> str:
        """Get the S3 key for a relative path."""
        return self._prefix + relative_path.lstrip(DIRECTORY_SEPARATOR)

    def _scan(self) -> Iterator[StoreObject]:
        paginator = self._client.get_paginator("list_objects_v2")
        pages = paginator.paginate(Bucket=self._bucket, Prefix=self._prefix)

        for page in pages:
            for entry in page.get("Contents", []):
                key = entry["Key"]
                relative_path = key[len(self._prefix):]
                if not relative_path:
                    # the prefix's own directory marker
                    continue
                yield S3Object(
                    client=self._client,
                    bucket=self._bucket,
                    key=key,
                    relative_path=relative_path,
                    size=entry.get("Size", 0),
                    etag=entry.get("ETag", ""),
                    storage_class=entry.get("StorageClass"),
                    endpoint_url=self._config.endpoint_url,
                )

    def _can_copy_server_side(self, obj: S3Object) -> bool:
        return (
            obj.endpoint_url == self._config.endpoint_url
            and obj.size <= MAX_COPY_SIZE
        )

    def _extra_args(self, metadata: ObjectMetadata) -> dict[str, Any]:
        """Build the write arguments shared by put, copy and multipart."""
        args: dict[str, Any] = {}
        if metadata.content_type:
            args["ContentType"] = metadata.content_type
        if metadata.storage_class:
            args["StorageClass"] = metadata.storage_class
        if metadata.checksum:
            args["Metadata"] = {CHECKSUM_METADATA_KEY: metadata.checksum}
        if self._config.acl:
            args["ACL"] = self._config.acl
        return args

    def object_metadata(self, obj: StoreObject) -> ObjectMetadata:
        """Build metadata for a written object.

        Content type and storage class are copied from an S3 source, and
        guessed from the file name otherwise. Last-modified times are not
        carried over: S3 assigns them on write.
        """
        if isinstance(obj, S3Object):
            source = obj.metadata()
            return ObjectMetadata(
                content_type=source.content_type,
                storage_class=source.storage_class,
                checksum=obj.checksum(),
            )
        return ObjectMetadata(
            content_type=guess_content_type(obj.relative_path),
            checksum=obj.checksum(),
        )

    def create(self, obj: StoreObject, relative_path: str | None = None) -> None:
        """Write an object to the bucket in a single request."""
        key = self._key(relative_path or obj.relative_path)

        if obj.is_directory:
            if not key.endswith(DIRECTORY_SEPARATOR):
                key += DIRECTORY_SEPARATOR
            self._client.put_object(Bucket=self._bucket, Key=key, Body=b"")
            return

        metadata = self.object_metadata(obj)
        extra_args = self._extra_args(metadata)

        if isinstance(obj, S3Object) and self._can_copy_server_side(obj):
            logger.debug(f"Server-side copy {obj} -> s3://{self._bucket}/{key}")
            self._client.copy_object(
                Bucket=self._bucket,
                Key=key,
                CopySource={"Bucket": obj.bucket, "Key": obj.key},
                MetadataDirective="REPLACE",
                **extra_args,
            )
            return

        with obj.open() as body:
            self._client.upload_fileobj(
                body,
                self._bucket,
                key,
                ExtraArgs=extra_args,
            )

    def delete(self, relative_path: str) -> None:
        """Delete an object; deleting a missing key is not an error."""
        self._client.delete_object(Bucket=self._bucket, Key=self._key(relative_path))

    def open_session(
        self,
        relative_path: str,
        metadata: ObjectMetadata,
        part_size: int,
    ) -> UploadSession:
        """Start a multipart upload."""
        response = self._client.create_multipart_upload(
            Bucket=self._bucket,
            Key=self._key(relative_path),
            **self._extra_args(metadata),
        )
        return UploadSession(
            session_id=response["UploadId"],
            relative_path=relative_path,
            part_size=part_size,
        )

    def upload_part(self, session: UploadSession, part_number: int, data: bytes) -> str:
        """Upload one part and return its ETag."""
        response = self._client.upload_part(
            Bucket=self._bucket,
            Key=self._key(session.relative_path),
            UploadId=session.session_id,
            PartNumber=part_number,
            Body=data,
            ContentLength=len(data),
        )
        return str(response["ETag"])

    def complete_session(
        self,
        session: UploadSession,
        parts: list[CompletedPart],
    ) -> None:
        """Assemble the uploaded parts into the final object."""
        self._client.complete_multipart_upload(
            Bucket=self._bucket,
            Key=self._key(session.relative_path),
            UploadId=session.session_id,
            MultipartUpload={
                "Parts": [
                    {"ETag": part.tag, "PartNumber": part.part_number}
                    for part in parts
                ]
            },
        )

    def abort_session(self, session: UploadSession) -> None:
        """Abort a multipart upload and release its parts."""
        self._client.abort_multipart_upload(
            Bucket=self._bucket,
            Key=self._key(session.relative_path),
            UploadId=session.session_id,
        )
