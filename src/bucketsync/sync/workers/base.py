"""Base worker class for executing sync actions.

This module provides:
- WorkerResult: Result of a worker execution
- WorkerContext: Action and callbacks handed to a worker
- BaseWorker: Abstract base class for action workers
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from bucketsync.core.errors import TransferError

if TYPE_CHECKING:
    from collections.abc import Callable

    from bucketsync.sync.types import SyncAction

logger = logging.getLogger(__name__)


@dataclass
class WorkerResult:
    """Result of a worker execution.

    Attributes:
        success: Whether the operation succeeded.
        result: The result value if successful (type depends on worker).
        error: The TransferError if failed.
        elapsed_time: Time taken in seconds.
    """

    success: bool
    result: Any = None
    error: TransferError | None = None
    elapsed_time: float = 0.0


@dataclass
class WorkerContext:
    """Context passed to worker execution.

    Attributes:
        action: The sync action being executed.
        on_progress: Optional progress callback (current_bytes, total_bytes).
    """

    action: SyncAction
    on_progress: Callable[[int, int], None] | None = None


class BaseWorker(ABC):
    """Abstract base class for action workers.

    Subclasses must implement:
    - _do_work(): The actual work logic
    - worker_type: Property returning the worker type name

    The scheduler creates one worker per action, so a worker never runs
    on two threads at once.

    Usage:
        class MyWorker(BaseWorker):
            @property
            def worker_type(self) -> str:
                return "my_worker"

            def _do_work(self, ctx: WorkerContext) -> MyResult:
                return MyResult(...)

        worker = MyWorker()
        result = worker.execute(action, on_progress=callback)
    """

    @property
    @abstractmethod
    def worker_type(self) -> str:
        """Return the worker type name (e.g., 'copy', 'delete')."""
        ...

    def execute(
        self,
        action: SyncAction,
        on_progress: Callable[[int, int], None] | None = None,
    ) -> WorkerResult:
        """Execute the worker operation.

        Errors never propagate: they are returned in the WorkerResult,
        wrapped in TransferError when they are not one already.

        Args:
            action: The sync action to execute.
            on_progress: Optional callback (current_bytes, total_bytes).

        Returns:
            WorkerResult describing the outcome.
        """
        start_time = time.time()
        ctx = WorkerContext(action=action, on_progress=on_progress)

        try:
            result_value = self._do_work(ctx)
        except Exception as e:
            elapsed = time.time() - start_time
            if isinstance(e, TransferError):
                error = e
            else:
                error = TransferError(
                    action.path, f"{self.worker_type} {action.path} failed: {e}"
                )
                error.__cause__ = e
            logger.error(f"{self.worker_type} worker failed: {error}")
            return WorkerResult(success=False, error=error, elapsed_time=elapsed)

        return WorkerResult(
            success=True,
            result=result_value,
            elapsed_time=time.time() - start_time,
        )

    @abstractmethod
    def _do_work(self, ctx: WorkerContext) -> Any:
        """Perform the actual work.

        Args:
            ctx: Worker context with the action and progress callback.

        Returns:
            The result of the operation.

        Raises:
            Exception: Any error during execution.
        """
        ...
