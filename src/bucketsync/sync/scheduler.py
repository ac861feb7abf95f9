"""Transfer scheduler executing sync actions with bounded parallelism.

This module provides:
- TransferScheduler: Dispatches actions in emitted order to a pool of
  worker threads and collects their results into a SyncReport
"""

from __future__ import annotations

import logging
import queue
import threading
from collections.abc import Callable, Iterable
from enum import Enum, auto
from typing import TYPE_CHECKING

from bucketsync.sync.types import ActionOutcome, ActionResult, ActionType, SyncAction, SyncReport
from bucketsync.sync.workers import BaseWorker, CopyWorker, DeleteWorker

if TYPE_CHECKING:
    from bucketsync.core.config import SyncConfig
    from bucketsync.stores.base import Store
    from bucketsync.sync.multipart import MultipartUploader

logger = logging.getLogger(__name__)

# Task queue slots per worker thread
QUEUE_FACTOR = 2


class SchedulerState(Enum):
    """State of the scheduler."""

    STOPPED = auto()
    RUNNING = auto()
    STOPPING = auto()


class TransferScheduler:
    """Executes sync actions against a destination store.

    Actions are dispatched strictly in the order they are produced, through
    a bounded task queue, to config.parallel worker threads. Skip actions
    and copies that already failed during planning are recorded by the
    dispatcher without taking a worker slot.

    Unless config.ignore_errors is set, the first failure stops further
    dispatch. Actions already running are never interrupted; they finish
    and their results are recorded.

    Usage:
        scheduler = TransferScheduler(dest_store, SyncConfig(parallel=8))
        report = scheduler.run(diff_engine.diff(source, destination))
    """

    def __init__(
        self,
        store: Store,
        config: SyncConfig,
        uploader: MultipartUploader | None = None,
    ) -> None:
        """Initialize the scheduler.

        Args:
            store: Destination store the actions apply to.
            config: Sync configuration (parallelism, dry run, error policy).
            uploader: Multipart uploader for large copies, if the store
                supports upload sessions.
        """
        self._store = store
        self._config = config
        self._uploader = uploader

        self._state = SchedulerState.STOPPED
        self._lock = threading.Lock()
        self._stop = threading.Event()
        self._task_queue: queue.Queue[SyncAction | None] = queue.Queue(
            maxsize=config.parallel * QUEUE_FACTOR
        )
        self._workers: list[threading.Thread] = []
        self._report = SyncReport()

    @property
    def state(self) -> SchedulerState:
        """Get current scheduler state."""
        return self._state

    def run(self, actions: Iterable[SyncAction]) -> SyncReport:
        """Execute every action and return the aggregate report.

        An exception raised while iterating actions (an enumeration failure
        in the diff) stops dispatch and becomes the report's fatal error.

        Args:
            actions: Actions in the order they must be dispatched.

        Returns:
            SyncReport with one result per dispatched action.
        """
        with self._lock:
            if self._state != SchedulerState.STOPPED:
                raise RuntimeError("Scheduler already running")
            self._state = SchedulerState.RUNNING
            self._stop.clear()
            self._report = SyncReport(
                dry_run=self._config.dry_run,
                ignore_errors=self._config.ignore_errors,
            )

        report = self._report
        self._start_workers()

        try:
            for action in actions:
                if self._stop.is_set():
                    report.halted = True
                    break
                self._dispatch(action)
        except Exception as e:
            logger.error(f"Sync aborted: {e}")
            with self._lock:
                if report.fatal_error is None:
                    report.fatal_error = e
                report.halted = True
            self._stop.set()
        except BaseException:
            self._stop.set()
            raise
        finally:
            self._stop_workers()

        return report

    def _dispatch(self, action: SyncAction) -> None:
        """Record an action directly or hand it to a worker."""
        if action.action_type == ActionType.SKIP:
            logger.debug(f"Skipping {action.path} ({action.reason})")
            self._report.record(ActionResult(action=action, outcome=ActionOutcome.SKIPPED))
            return

        if action.error is not None:
            self._record_failure(ActionResult(
                action=action,
                outcome=ActionOutcome.FAILED,
                error=action.error,
            ))
            return

        if self._config.dry_run:
            logger.info(f"Would {action.describe()}")
            self._report.record(ActionResult(action=action, outcome=ActionOutcome.APPLIED))
            return

        self._task_queue.put(action)

    def _start_workers(self) -> None:
        for i in range(self._config.parallel):
            thread = threading.Thread(
                target=self._worker_loop,
                name=f"TransferScheduler-{i}",
                daemon=True,
            )
            thread.start()
            self._workers.append(thread)
        logger.debug(f"Transfer scheduler started with {self._config.parallel} workers")

    def _stop_workers(self) -> None:
        with self._lock:
            self._state = SchedulerState.STOPPING

        # Send poison pills to stop workers
        for _ in self._workers:
            self._task_queue.put(None)

        for worker in self._workers:
            worker.join()

        with self._lock:
            self._workers.clear()
            self._state = SchedulerState.STOPPED

    def _worker_loop(self) -> None:
        """Main loop for worker threads."""
        while True:
            action = self._task_queue.get()
            if action is None:
                # Poison pill - stop worker
                break

            if self._stop.is_set():
                # Queued behind a fatal failure, never started
                logger.debug(f"Not dispatched after failure: {action.path}")
                self._report.halted = True
                continue

            try:
                self._process(action)
            except Exception:
                logger.exception(f"Unexpected error in worker loop: {action.path}")

    def _process(self, action: SyncAction) -> None:
        """Execute one action on the current worker thread."""
        worker = self._create_worker(action.action_type)
        result = worker.execute(action, on_progress=self._progress_logger(action))

        if result.success:
            self._report.record(ActionResult(
                action=action,
                outcome=ActionOutcome.APPLIED,
                elapsed_time=result.elapsed_time,
            ))
            return

        self._record_failure(ActionResult(
            action=action,
            outcome=ActionOutcome.FAILED,
            error=result.error,
            elapsed_time=result.elapsed_time,
        ))

    def _progress_logger(self, action: SyncAction) -> Callable[[int, int], None]:
        """Build a callback logging transfer progress for one action."""

        def on_progress(current: int, total: int) -> None:
            percent = 100 * current // total if total else 100
            logger.debug(f"{action.path}: {current}/{total} bytes ({percent}%)")

        return on_progress

    def _record_failure(self, result: ActionResult) -> None:
        """Record a failed action and apply the error policy."""
        self._report.record(result)
        if self._config.ignore_errors:
            logger.warning(f"Failed to {result.action.describe()}: {result.error}")
            return

        logger.error(f"Failed to {result.action.describe()}: {result.error}")
        with self._lock:
            if self._report.fatal_error is None:
                self._report.fatal_error = result.error
        self._stop.set()

    def _create_worker(self, action_type: ActionType) -> BaseWorker:
        """Create a worker for the given action type.

        Args:
            action_type: Type of action.

        Returns:
            Appropriate worker instance.
        """
        if action_type == ActionType.COPY:
            return CopyWorker(self._store, self._uploader)
        elif action_type == ActionType.DELETE:
            return DeleteWorker(self._store)
        else:
            raise ValueError(f"No worker for action type: {action_type}")
