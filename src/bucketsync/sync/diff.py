"""Diff engine: plan the actions that make a destination match a source.

The destination listing is drained into an index first; source objects
are then streamed and each produces exactly one copy or skip action.
Deletions are planned last, and only from a complete source listing.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from bucketsync.core.errors import ChecksumError
from bucketsync.stores.base import DIRECTORY_SEPARATOR
from bucketsync.sync.types import SKIP_DIRECTORY, SKIP_IDENTICAL, SyncAction

if TYPE_CHECKING:
    from bucketsync.stores.base import StoreObject
    from bucketsync.stores.listing import Listing

logger = logging.getLogger(__name__)

PathMap = Callable[[str], str]


def parent_directories(relative_path: str) -> Iterator[str]:
    """Yield every ancestor directory of a path, in marker form.

    "a/b/c.txt" yields "a/" and "a/b/".
    """
    parts = relative_path.rstrip(DIRECTORY_SEPARATOR).split(DIRECTORY_SEPARATOR)
    for depth in range(1, len(parts)):
        yield DIRECTORY_SEPARATOR.join(parts[:depth]) + DIRECTORY_SEPARATOR


def prune_boundary(relative_path: str, kept: set[str]) -> str:
    """Return the deepest ancestor of a path found in `kept`, or "" for the root."""
    boundary = ""
    for directory in parent_directories(relative_path):
        if directory in kept:
            boundary = directory
    return boundary


@dataclass
class DestinationIndex:
    """Destination objects keyed by relative path.

    Attributes:
        objects: Destination objects by relative path.
        directories: Every directory that holds at least one object.
    """

    objects: dict[str, StoreObject] = field(default_factory=dict)
    directories: set[str] = field(default_factory=set)

    def add(self, obj: StoreObject) -> None:
        """Index one destination object."""
        if obj.relative_path in self.objects:
            logger.warning(f"Duplicate destination path ignored: {obj.relative_path}")
            return
        self.objects[obj.relative_path] = obj
        self.directories.update(parent_directories(obj.relative_path))

    def has_directory(self, path: str) -> bool:
        """Check if a directory exists as a marker or through its contents."""
        return path in self.objects or path in self.directories

    def __len__(self) -> int:
        return len(self.objects)


class DiffEngine:
    """Computes sync actions from a source and a destination listing.

    Usage:
        engine = DiffEngine(delete_extraneous=True)
        for action in engine.diff(source.files(), destination.files()):
            ...
    """

    def __init__(
        self,
        delete_extraneous: bool = False,
        path_map: PathMap | None = None,
    ) -> None:
        """Initialize the diff engine.

        Args:
            delete_extraneous: Plan deletion of destination-only objects.
            path_map: Maps a source relative path to a destination relative
                path; identity by default.
        """
        self._delete_extraneous = delete_extraneous
        self._path_map = path_map or (lambda path: path)

    def index(self, destination: Listing) -> DestinationIndex:
        """Drain a destination listing into an index.

        Raises:
            EnumerationError: If the destination listing failed.
        """
        index = DestinationIndex()
        for obj in destination:
            index.add(obj)
        destination.result().raise_for_error()
        logger.debug(f"Indexed {len(index)} objects in {destination.location}")
        return index

    def diff(self, source: Listing, destination: Listing) -> Iterator[SyncAction]:
        """Yield the actions that bring the destination in line with the source.

        Args:
            source: Listing of the source store.
            destination: Listing of the destination store.

        Yields:
            One copy or skip per source path, then deletes if enabled.

        Raises:
            EnumerationError: If either listing failed. A destination
                failure is raised before any action; a source failure is
                raised after its partial actions and before any delete.
        """
        index = self.index(destination)
        visited: set[str] = set()
        source_directories: set[str] = set()

        for obj in source:
            path = self._path_map(obj.relative_path)
            if path in visited:
                logger.warning(f"Duplicate source path ignored: {obj.relative_path}")
                continue
            visited.add(path)
            source_directories.update(parent_directories(path))
            if obj.is_directory:
                source_directories.add(path)
            yield self._compare(obj, path, index)

        source.result().raise_for_error()

        if not self._delete_extraneous:
            return

        for path in sorted(index.objects):
            if path in visited:
                continue
            if path.endswith(DIRECTORY_SEPARATOR) and path in source_directories:
                # the directory still holds source objects
                continue
            yield SyncAction.delete(path, prune_boundary(path, source_directories))

    def _compare(self, obj: StoreObject, path: str, index: DestinationIndex) -> SyncAction:
        """Decide the action for one source object."""
        if obj.is_directory:
            if index.has_directory(path):
                return SyncAction.skip(path, SKIP_DIRECTORY)
            return SyncAction.copy(obj, path)

        existing = index.objects.get(path)
        if existing is None:
            return SyncAction.copy(obj, path)

        if existing.is_directory or existing.size != obj.size:
            return SyncAction.copy(obj, path)

        try:
            source_checksum = obj.checksum()
        except ChecksumError as e:
            logger.warning(f"Cannot compare {obj.relative_path}: {e}")
            return SyncAction.copy(obj, path, error=e)

        try:
            destination_checksum = existing.checksum()
        except ChecksumError as e:
            logger.debug(f"No usable destination digest for {path}: {e}")
            return SyncAction.copy(obj, path)

        if source_checksum == destination_checksum:
            return SyncAction.skip(path, SKIP_IDENTICAL)
        return SyncAction.copy(obj, path)
