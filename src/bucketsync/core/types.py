"""Shared types for bucketsync.

This module defines the value types exchanged between stores and the
multipart upload protocol.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from enum import Enum, auto

# Unfinished sessions are considered abandoned after this long
DEFAULT_SESSION_TTL = timedelta(days=1)


@dataclass(frozen=True)
class ObjectMetadata:
    """Transfer hints carried alongside an object's bytes.

    Attributes:
        content_type: MIME type, None when unknown.
        storage_class: Backend storage class, None for the backend default.
        checksum: Hex content digest recorded as user metadata.
    """

    content_type: str | None = None
    storage_class: str | None = None
    checksum: str | None = None


class SessionState(Enum):
    """State of a multipart upload session."""

    INIT = auto()
    OPEN = auto()
    UPLOADING = auto()
    COMPLETING = auto()
    COMPLETE = auto()
    ABORTING = auto()
    ABORTED = auto()

    @property
    def is_terminal(self) -> bool:
        """Check if the session has finished, successfully or not."""
        return self in (SessionState.COMPLETE, SessionState.ABORTED)


@dataclass(frozen=True)
class CompletedPart:
    """A part acknowledged by the destination store."""

    part_number: int
    tag: str


@dataclass
class UploadSession:
    """State of one multipart upload.

    Attributes:
        session_id: Identifier assigned by the destination store.
        relative_path: Destination path of the assembled object.
        part_size: Size of every part except the last.
        parts: Completed parts in increasing part-number order.
        expiry: Absolute UTC deadline after which the session is abandoned.
        state: Current protocol state.
    """

    session_id: str
    relative_path: str
    part_size: int
    parts: list[CompletedPart] = field(default_factory=list)
    expiry: datetime = field(
        default_factory=lambda: datetime.now(UTC) + DEFAULT_SESSION_TTL
    )
    state: SessionState = SessionState.OPEN

    @property
    def expired(self) -> bool:
        """Check if the session outlived its expiry."""
        return datetime.now(UTC) >= self.expiry

    def add_part(self, part: CompletedPart) -> None:
        """Append a completed part, enforcing strictly increasing numbers."""
        if self.parts and part.part_number <= self.parts[-1].part_number:
            raise ValueError(
                f"Part {part.part_number} out of order after "
                f"{self.parts[-1].part_number}"
            )
        self.parts.append(part)
