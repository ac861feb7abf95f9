"""Store abstraction shared by every backend.

This module provides:
- StoreObject: A named, sized, digestible unit of data held by a store
- Store: Abstract interface for enumerating, creating and deleting objects
- MultipartStore: A store that also accepts chunked upload sessions

The diff engine and transfer scheduler depend only on these interfaces,
never on a concrete backend.
"""

from __future__ import annotations

import mimetypes
import threading
from abc import ABC, abstractmethod
from collections.abc import Iterator
from typing import BinaryIO

from bucketsync.core.checksum import new_hasher
from bucketsync.core.errors import ChecksumError
from bucketsync.core.types import CompletedPart, ObjectMetadata, UploadSession
from bucketsync.stores.listing import Listing

DEFAULT_CONTENT_TYPE = "application/binary"
DIRECTORY_SEPARATOR = "/"


def guess_content_type(relative_path: str) -> str:
    """Guess a MIME type from a file name, falling back to a binary type."""
    content_type, _ = mimetypes.guess_type(relative_path)
    return content_type or DEFAULT_CONTENT_TYPE


class StoreObject(ABC):
    """An object enumerated from a store.

    The content digest is computed lazily and memoized: the bytes are read
    at most once per instance. A failed computation is not cached.
    """

    backend = ""

    def __init__(self, relative_path: str, size: int, is_directory: bool = False) -> None:
        """Initialize the object.

        Args:
            relative_path: Slash-separated path relative to the store root.
            size: Size in bytes.
            is_directory: Whether this is a directory marker.
        """
        if size < 0:
            raise ValueError(f"Negative size for {relative_path}: {size}")
        self._relative_path = relative_path
        self._size = size
        self._is_directory = is_directory
        self._checksum: str | None = None
        self._checksum_lock = threading.Lock()

    @property
    def relative_path(self) -> str:
        """Return the path relative to the store root."""
        return self._relative_path

    @property
    def size(self) -> int:
        """Return the size in bytes."""
        return self._size

    @property
    def is_directory(self) -> bool:
        """Check if this object is a directory marker."""
        return self._is_directory

    def checksum(self) -> str:
        """Return the hex content digest, computing it on first use.

        Returns:
            Lowercase hexadecimal digest.

        Raises:
            ChecksumError: If the object could not be read.
        """
        with self._checksum_lock:
            if self._checksum is None:
                if self._is_directory:
                    self._checksum = new_hasher().hexdigest()
                else:
                    try:
                        self._checksum = self._compute_checksum()
                    except ChecksumError:
                        raise
                    except Exception as e:
                        raise ChecksumError(self._relative_path, e) from e
            return self._checksum

    def metadata(self) -> ObjectMetadata:
        """Return transfer hints known for this object."""
        return ObjectMetadata()

    @abstractmethod
    def open(self) -> BinaryIO:
        """Open the object's bytes for reading."""

    @abstractmethod
    def _compute_checksum(self) -> str:
        """Compute the content digest by reading the object."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._relative_path!r}, size={self._size})"


class Store(ABC):
    """Abstract interface for a storage backend rooted at a location."""

    backend = ""

    @property
    @abstractmethod
    def location(self) -> str:
        """Return a human-readable description of the store root."""

    def files(self) -> Listing:
        """Enumerate the objects under the store root.

        Every call starts a new, single-pass enumeration. Enumeration
        errors are reported by the listing's result() once drained.
        """
        return Listing(self.location, self._scan)

    @abstractmethod
    def _scan(self) -> Iterator[StoreObject]:
        """Yield the objects under the store root (runs on the listing thread)."""

    @abstractmethod
    def create(self, obj: StoreObject, relative_path: str | None = None) -> None:
        """Write an object's bytes into this store, overwriting silently.

        Args:
            obj: Source object, possibly from another store.
            relative_path: Destination path; defaults to obj.relative_path.
        """

    @abstractmethod
    def delete(self, relative_path: str) -> None:
        """Delete the object at a relative path.

        Args:
            relative_path: Path relative to the store root.
        """

    def remove_empty_parents(self, relative_path: str, boundary: str = "") -> None:
        """Remove directories a delete left empty, up to `boundary`.

        Object stores have no directories, so this does nothing by default.

        Args:
            relative_path: Path of the deleted object.
            boundary: Ancestor directory to keep; "" keeps only the root.
        """

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.location!r})"


class MultipartStore(Store):
    """A store that can assemble an object from sequentially uploaded parts."""

    # Smallest part size the backend accepts for non-final parts
    min_part_size = 1

    def object_metadata(self, obj: StoreObject) -> ObjectMetadata:
        """Build the metadata recorded for an object written to this store.

        Args:
            obj: Source object.

        Returns:
            ObjectMetadata with guessed content type and the source digest.
        """
        return ObjectMetadata(
            content_type=guess_content_type(obj.relative_path),
            checksum=obj.checksum(),
        )

    @abstractmethod
    def open_session(
        self,
        relative_path: str,
        metadata: ObjectMetadata,
        part_size: int,
    ) -> UploadSession:
        """Start a multipart upload session.

        Args:
            relative_path: Destination path of the assembled object.
            metadata: Hints stored with the assembled object.
            part_size: Size of every part except the last.

        Returns:
            An open UploadSession.
        """

    @abstractmethod
    def upload_part(self, session: UploadSession, part_number: int, data: bytes) -> str:
        """Upload one part of an open session.

        Returns:
            Tag identifying the stored part (the part's ETag on S3).
        """

    @abstractmethod
    def complete_session(
        self,
        session: UploadSession,
        parts: list[CompletedPart],
    ) -> None:
        """Assemble the uploaded parts, in order, into one object."""

    @abstractmethod
    def abort_session(self, session: UploadSession) -> None:
        """Abandon a session and release its uploaded parts."""
