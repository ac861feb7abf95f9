"""Local filesystem store.

Relative paths use "/" regardless of the platform separator. Empty
directories are enumerated as directory markers ("name/") so they survive
a round trip through an object store.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator
from pathlib import Path
from typing import BinaryIO

from bucketsync.core.checksum import compute_file_checksum
from bucketsync.stores.base import DIRECTORY_SEPARATOR, Store, StoreObject

logger = logging.getLogger(__name__)

PARTIAL_SUFFIX = ".bucketsync-partial"
COPY_BLOCK_SIZE = 1024 * 1024  # 1 MB


class LocalObject(StoreObject):
    """A file or empty directory on the local filesystem."""

    backend = "local"

    def __init__(
        self,
        full_path: Path,
        relative_path: str,
        size: int,
        is_directory: bool = False,
    ) -> None:
        super().__init__(relative_path, size, is_directory)
        self._full_path = full_path

    @property
    def full_path(self) -> Path:
        """Return the absolute path of the file."""
        return self._full_path

    def open(self) -> BinaryIO:
        """Open the file for reading."""
        return open(self._full_path, "rb")

    def _compute_checksum(self) -> str:
        return compute_file_checksum(self._full_path)


def _open_partial(partial: Path) -> BinaryIO:
    """Create a partial file, making its parent directories.

    A concurrent delete may prune the freshly made parent before the file
    is opened; the directory is then made once more.
    """
    partial.parent.mkdir(parents=True, exist_ok=True)
    try:
        return open(partial, "wb")
    except FileNotFoundError:
        partial.parent.mkdir(parents=True, exist_ok=True)
        return open(partial, "wb")


class LocalStore(Store):
    """Store rooted at a local file or directory.

    A root that is a single file enumerates as one object named after the
    file. A missing root enumerates as empty.
    """

    backend = "local"

    def __init__(self, root: Path | str, missing_ok: bool = True) -> None:
        """Initialize local store.

        Args:
            root: Root file or directory.
            missing_ok: Treat deleting a missing object as success.
        """
        self._root = Path(root).expanduser().resolve()
        self._missing_ok = missing_ok

    @property
    def location(self) -> str:
        """Return the local root path."""
        return str(self._root)

    @property
    def root(self) -> Path:
        """Return the resolved root path."""
        return self._root

    def _scan(self) -> Iterator[StoreObject]:
        if not self._root.exists():
            logger.debug(f"Local root {self._root} does not exist, nothing to list")
            return
        if self._root.is_file():
            yield LocalObject(self._root, self._root.name, self._root.stat().st_size)
            return
        yield from self._scan_directory(self._root, "")

    def _scan_directory(self, directory: Path, prefix: str) -> Iterator[StoreObject]:
        with os.scandir(directory) as it:
            entries = sorted(it, key=lambda e: e.name)

        if not entries and prefix:
            yield LocalObject(directory, prefix, 0, is_directory=True)
            return

        for entry in entries:
            relative = f"{prefix}{entry.name}"
            if entry.name.endswith(PARTIAL_SUFFIX):
                continue
            if entry.is_dir(follow_symlinks=False):
                yield from self._scan_directory(
                    Path(entry.path), relative + DIRECTORY_SEPARATOR
                )
            elif entry.is_file():
                yield LocalObject(Path(entry.path), relative, entry.stat().st_size)
            else:
                logger.debug(f"Skipping special file: {entry.path}")

    def _resolve(self, relative_path: str) -> Path:
        """Map a relative path under the root, refusing to escape it."""
        parts = [p for p in relative_path.split(DIRECTORY_SEPARATOR) if p]
        if any(p in (".", "..") for p in parts):
            raise ValueError(f"Relative path escapes store root: {relative_path!r}")
        return self._root.joinpath(*parts)

    def create(self, obj: StoreObject, relative_path: str | None = None) -> None:
        """Write an object to disk, creating parent directories.

        Files are written to a temporary sibling and moved into place so a
        failed transfer never leaves a truncated file under the final name.
        """
        relative_path = relative_path or obj.relative_path
        target = self._resolve(relative_path)

        if obj.is_directory:
            target.mkdir(parents=True, exist_ok=True)
            return

        partial = target.with_name(target.name + PARTIAL_SUFFIX)
        writer = _open_partial(partial)
        try:
            with writer, obj.open() as reader:
                for block in iter(lambda: reader.read(COPY_BLOCK_SIZE), b""):
                    writer.write(block)
            os.replace(partial, target)
        except BaseException:
            partial.unlink(missing_ok=True)
            raise

    def delete(self, relative_path: str) -> None:
        """Delete a file or an empty directory.

        Raises:
            FileNotFoundError: If the object is missing and missing_ok is False.
            OSError: If a directory marker's directory is not empty.
        """
        target = self._resolve(relative_path)
        try:
            if relative_path.endswith(DIRECTORY_SEPARATOR):
                target.rmdir()
            else:
                target.unlink()
        except FileNotFoundError:
            if not self._missing_ok:
                raise
            logger.debug(f"Already deleted: {relative_path}")

    def remove_empty_parents(self, relative_path: str, boundary: str = "") -> None:
        """Remove directories a delete left empty, up to `boundary`.

        An emptied directory would otherwise be listed as a directory
        marker by the next enumeration. Directories that are not empty
        are kept.
        """
        stop = self._resolve(boundary)
        directory = self._resolve(relative_path).parent
        while directory != stop and stop in directory.parents:
            try:
                directory.rmdir()
            except OSError:
                # not empty, or already removed
                break
            logger.debug(f"Removed empty directory {directory}")
            directory = directory.parent
