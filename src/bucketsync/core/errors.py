"""Error taxonomy shared by stores and the sync engine.

This module provides:
- SyncError: Base exception for every sync failure
- EnumerationError: A store could not list its contents
- TransferError: A single sync action failed
- ChecksumError: Content digest could not be computed
- SessionError: A multipart upload session failed and was aborted
- AbortError: Aborting an already failed session failed as well
"""

from __future__ import annotations


class SyncError(Exception):
    """Base exception for sync errors."""


class EnumerationError(SyncError):
    """A store failed while listing its objects.

    Diff results derived from a partial listing are unreliable, so this
    error is fatal to the whole sync run.

    Attributes:
        location: Root location of the store that failed.
    """

    def __init__(self, location: str, cause: BaseException | None = None) -> None:
        self.location = location
        self.cause = cause
        message = f"Failed to list {location}"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)


class TransferError(SyncError):
    """A single copy or delete action failed.

    Attributes:
        path: Relative path targeted by the failed action.
    """

    def __init__(self, path: str, message: str) -> None:
        self.path = path
        super().__init__(message)


class ChecksumError(TransferError):
    """Computing the content digest of an object failed."""

    def __init__(self, path: str, cause: BaseException) -> None:
        self.cause = cause
        super().__init__(path, f"Checksum failed for {path}: {cause}")


class AbortError(SyncError):
    """Aborting a failed upload session failed.

    Never raised on its own: it is attached to the SessionError that
    triggered the abort so both failures are reported.
    """

    def __init__(self, session_id: str, cause: BaseException) -> None:
        self.session_id = session_id
        self.cause = cause
        super().__init__(f"Abort of upload session {session_id} failed: {cause}")


class SessionError(TransferError):
    """A multipart upload session failed.

    Attributes:
        path: Relative path of the object being uploaded.
        reason: Description of the failure, without causes appended.
        last_error: The error that made the session unrecoverable.
        abort_error: Set when the cleanup abort failed too.
    """

    def __init__(
        self,
        path: str,
        message: str,
        last_error: BaseException | None = None,
        abort_error: AbortError | None = None,
    ) -> None:
        self.reason = message
        self.last_error = last_error
        self.abort_error = abort_error
        if last_error is not None:
            message = f"{message}: {last_error}"
        if abort_error is not None:
            message = f"{message} ({abort_error})"
        super().__init__(path, message)
