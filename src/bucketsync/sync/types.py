"""Shared types and dataclasses for sync operations.

This module provides:
- ActionType, SyncAction: Decisions produced by the diff engine
- ActionOutcome, ActionResult: Per-action results of the scheduler
- SyncReport: Aggregate result of a sync run
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from bucketsync.stores.base import StoreObject

SKIP_IDENTICAL = "identical"
SKIP_DIRECTORY = "directory"


class ActionType(Enum):
    """Kind of sync action."""

    COPY = auto()
    DELETE = auto()
    SKIP = auto()


@dataclass(frozen=True)
class SyncAction:
    """A planned change to the destination store.

    Attributes:
        action_type: Copy, delete or skip.
        path: Destination relative path targeted by the action.
        source: Source object to copy (copy actions only).
        reason: Why the path is skipped (skip actions only).
        error: Failure detected while planning; the action is reported
            as failed without performing any I/O.
        prune_boundary: Deepest ancestor directory the source still holds
            (delete actions only). Directories emptied by the delete are
            removed up to, but not including, this one; "" is the root.
    """

    action_type: ActionType
    path: str
    source: StoreObject | None = None
    reason: str = ""
    error: Exception | None = None
    prune_boundary: str = ""

    @classmethod
    def copy(
        cls,
        source: StoreObject,
        path: str | None = None,
        error: Exception | None = None,
    ) -> SyncAction:
        """Create a copy action for a source object."""
        return cls(
            action_type=ActionType.COPY,
            path=path if path is not None else source.relative_path,
            source=source,
            error=error,
        )

    @classmethod
    def delete(cls, path: str, prune_boundary: str = "") -> SyncAction:
        """Create a delete action for a destination path."""
        return cls(action_type=ActionType.DELETE, path=path, prune_boundary=prune_boundary)

    @classmethod
    def skip(cls, path: str, reason: str) -> SyncAction:
        """Create a skip action."""
        return cls(action_type=ActionType.SKIP, path=path, reason=reason)

    def describe(self) -> str:
        """Human-readable one-line description."""
        if self.action_type == ActionType.COPY:
            return f"copy {self.source!r} -> {self.path}"
        if self.action_type == ActionType.DELETE:
            return f"delete {self.path}"
        return f"skip {self.path} ({self.reason})"

    def __repr__(self) -> str:
        return f"SyncAction({self.action_type.name}, path={self.path!r})"


class ActionOutcome(Enum):
    """Result of executing one action."""

    APPLIED = auto()
    SKIPPED = auto()
    FAILED = auto()


@dataclass
class ActionResult:
    """Result of one executed action.

    Attributes:
        action: The action that was executed.
        outcome: Applied, skipped or failed.
        error: Error if failed.
        elapsed_time: Time taken in seconds.
    """

    action: SyncAction
    outcome: ActionOutcome
    error: Exception | None = None
    elapsed_time: float = 0.0


@dataclass
class SyncReport:
    """Aggregate result of a sync run.

    Results are appended from worker threads through record(), the single
    exclusion point of the run.

    Attributes:
        results: Results of every dispatched action, in completion order.
        dry_run: Whether the run performed no I/O.
        ignore_errors: Whether failures were allowed to continue the run.
        fatal_error: Error that stopped the run, if any.
        halted: Whether dispatch stopped before the last action.
    """

    results: list[ActionResult] = field(default_factory=list)
    dry_run: bool = False
    ignore_errors: bool = False
    fatal_error: Exception | None = None
    halted: bool = False
    _lock: threading.Lock = field(
        default_factory=threading.Lock, repr=False, compare=False
    )

    def record(self, result: ActionResult) -> None:
        """Append one action result."""
        with self._lock:
            self.results.append(result)

    def _by_outcome(self, outcome: ActionOutcome) -> list[ActionResult]:
        with self._lock:
            return [r for r in self.results if r.outcome == outcome]

    @property
    def applied(self) -> list[ActionResult]:
        """Results of actions that were applied (or would be, in a dry run)."""
        return self._by_outcome(ActionOutcome.APPLIED)

    @property
    def skipped(self) -> list[ActionResult]:
        """Results of skipped actions."""
        return self._by_outcome(ActionOutcome.SKIPPED)

    @property
    def failed(self) -> list[ActionResult]:
        """Results of failed actions, including failures masked by ignore_errors."""
        return self._by_outcome(ActionOutcome.FAILED)

    def tally(self) -> dict[str, int]:
        """Count results per outcome."""
        return {
            "applied": len(self.applied),
            "skipped": len(self.skipped),
            "failed": len(self.failed),
        }

    @property
    def failed_run(self) -> bool:
        """Check if the run must be reported as failed.

        True on any fatal condition, and also when ignore_errors let the
        run continue past failed actions.
        """
        return self.fatal_error is not None or bool(self.failed)
