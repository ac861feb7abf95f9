"""Copy worker for transferring source objects to the destination store.

This module provides:
- CopyWorker: Worker that writes one source object to the destination,
  through a multipart session when the object is large enough
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from bucketsync.sync.workers.base import BaseWorker, WorkerContext

if TYPE_CHECKING:
    from bucketsync.stores.base import Store
    from bucketsync.sync.multipart import MultipartUploader

logger = logging.getLogger(__name__)


class CopyWorker(BaseWorker):
    """Worker for copying objects into a store.

    Usage:
        worker = CopyWorker(dest_store, uploader)
        result = worker.execute(action, on_progress=callback)
    """

    def __init__(self, store: Store, uploader: MultipartUploader | None = None) -> None:
        """Initialize the copy worker.

        Args:
            store: Destination store.
            uploader: Multipart uploader bound to the same store, used for
                objects above its part size. None disables multipart.
        """
        super().__init__()
        self._store = store
        self._uploader = uploader

    @property
    def worker_type(self) -> str:
        """Return worker type name."""
        return "copy"

    def _do_work(self, ctx: WorkerContext) -> str:
        """Perform the copy.

        Returns:
            "multipart" or "single" depending on the path taken.

        Raises:
            ChecksumError: If the source digest is needed and fails.
            SessionError: If a multipart session failed.
            Exception: Any backend error from a single-shot write.
        """
        action = ctx.action
        source = action.source
        if source is None:
            raise ValueError(f"Copy action for {action.path} has no source")

        if self._uploader is not None and self._uploader.needs_multipart(source):
            self._uploader.upload(source, action.path, on_progress=ctx.on_progress)
            logger.info(f"Copied {source!r} -> {action.path} (multipart)")
            return "multipart"

        self._store.create(source, action.path)
        if ctx.on_progress:
            ctx.on_progress(source.size, source.size)
        logger.info(f"Copied {source!r} -> {action.path}")
        return "single"
