"""Sync engine: diff, schedule and transfer objects between stores.

Architecture:
    Store.files() → DiffEngine → TransferScheduler → Workers

Components:
- **DiffEngine**: Compares a source and a destination listing and emits
  copy, skip and delete actions
- **TransferScheduler**: Runs actions with bounded parallelism and collects
  a SyncReport
- **Workers**: Execute actions (CopyWorker, DeleteWorker)
- **MultipartUploader**: Chunked upload protocol for large objects
- **SyncEngine**: Wires the above together for one run

All public symbols are re-exported here.
"""

from bucketsync.core.errors import (
    AbortError,
    ChecksumError,
    EnumerationError,
    SessionError,
    SyncError,
    TransferError,
)
from bucketsync.sync.diff import DestinationIndex, DiffEngine, PathMap
from bucketsync.sync.engine import SyncEngine
from bucketsync.sync.multipart import MultipartUploader
from bucketsync.sync.retry import (
    DEFAULT_BACKOFF_MULTIPLIER,
    DEFAULT_INITIAL_BACKOFF,
    DEFAULT_MAX_BACKOFF,
    DEFAULT_MAX_RETRIES,
    AttemptState,
    RetryBudget,
    retry_with_backoff,
)
from bucketsync.sync.scheduler import SchedulerState, TransferScheduler
from bucketsync.sync.types import (
    SKIP_DIRECTORY,
    SKIP_IDENTICAL,
    ActionOutcome,
    ActionResult,
    ActionType,
    SyncAction,
    SyncReport,
)
from bucketsync.sync.workers import (
    BaseWorker,
    CopyWorker,
    DeleteWorker,
    WorkerContext,
    WorkerResult,
)

__all__ = [
    # Errors
    "AbortError",
    "ChecksumError",
    "EnumerationError",
    "SessionError",
    "SyncError",
    "TransferError",
    # Diff
    "DestinationIndex",
    "DiffEngine",
    "PathMap",
    # Engine
    "SyncEngine",
    # Multipart
    "MultipartUploader",
    # Retry
    "DEFAULT_BACKOFF_MULTIPLIER",
    "DEFAULT_INITIAL_BACKOFF",
    "DEFAULT_MAX_BACKOFF",
    "DEFAULT_MAX_RETRIES",
    "AttemptState",
    "RetryBudget",
    "retry_with_backoff",
    # Scheduler
    "SchedulerState",
    "TransferScheduler",
    # Types
    "SKIP_DIRECTORY",
    "SKIP_IDENTICAL",
    "ActionOutcome",
    "ActionResult",
    "ActionType",
    "SyncAction",
    "SyncReport",
    # Workers
    "BaseWorker",
    "CopyWorker",
    "DeleteWorker",
    "WorkerContext",
    "WorkerResult",
]
