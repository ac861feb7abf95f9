"""Delete worker for removing extraneous destination objects.

This module provides:
- DeleteWorker: Worker that deletes one path from the destination store
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from bucketsync.sync.workers.base import BaseWorker, WorkerContext

if TYPE_CHECKING:
    from bucketsync.stores.base import Store

logger = logging.getLogger(__name__)


class DeleteWorker(BaseWorker):
    """Worker for deleting objects from a store.

    Usage:
        worker = DeleteWorker(dest_store)
        result = worker.execute(action)
    """

    def __init__(self, store: Store) -> None:
        """Initialize the delete worker.

        Args:
            store: Store to delete from.
        """
        super().__init__()
        self._store = store

    @property
    def worker_type(self) -> str:
        """Return worker type name."""
        return "delete"

    def _do_work(self, ctx: WorkerContext) -> str:
        relative_path = ctx.action.path
        try:
            self._store.delete(relative_path)
        except Exception as e:
            logger.error(f"Failed to delete {self._store.location}/{relative_path}: {e}")
            raise
        logger.info(f"Deleted {self._store.location}/{relative_path}")
        self._store.remove_empty_parents(relative_path, ctx.action.prune_boundary)
        return relative_path
