"""Workers executing sync actions against a destination store.

This module provides:
- BaseWorker: Abstract base class for action workers
- CopyWorker: Copies one source object, multipart when large
- DeleteWorker: Deletes one destination path
"""

from bucketsync.sync.workers.base import (
    BaseWorker,
    WorkerContext,
    WorkerResult,
)
from bucketsync.sync.workers.copy_worker import CopyWorker
from bucketsync.sync.workers.delete_worker import DeleteWorker

__all__ = [
    # Base
    "BaseWorker",
    "WorkerContext",
    "WorkerResult",
    # Workers
    "CopyWorker",
    "DeleteWorker",
]
