"""Chunked upload protocol for large objects.

State machine (terminal states COMPLETE and ABORTED):

    INIT → OPEN → UPLOADING* → COMPLETING → COMPLETE
    any state after OPEN → ABORTING → ABORTED

Parts are read sequentially from the source, uploaded in increasing
part-number order, and each part is retried under a bounded budget with
the identical bytes. A session is never left open: every failure after
OPEN attempts an abort before the error reaches the caller.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

from bucketsync.core.chunking import Part, part_count, read_parts
from bucketsync.core.config import (
    DEFAULT_PART_RETRIES,
    DEFAULT_PART_SIZE,
    DEFAULT_RETRY_BACKOFF,
)
from bucketsync.core.errors import AbortError, SessionError, TransferError
from bucketsync.core.types import CompletedPart, SessionState, UploadSession
from bucketsync.sync.retry import retry_with_backoff

if TYPE_CHECKING:
    from bucketsync.core.types import ObjectMetadata
    from bucketsync.stores.base import MultipartStore, StoreObject

logger = logging.getLogger(__name__)


class MultipartUploader:
    """Uploads objects larger than the part size as multipart sessions.

    Usage:
        uploader = MultipartUploader(s3_store, part_size=6_000_000)
        if uploader.needs_multipart(obj):
            uploader.upload(obj)
    """

    def __init__(
        self,
        target: MultipartStore,
        part_size: int = DEFAULT_PART_SIZE,
        max_retries: int = DEFAULT_PART_RETRIES,
        initial_backoff: float = DEFAULT_RETRY_BACKOFF,
        session_ttl: timedelta | None = None,
    ) -> None:
        """Initialize the uploader.

        Args:
            target: Destination store accepting upload sessions.
            part_size: Threshold above which objects use multipart, and the
                requested part size. Raised to the target's minimum if lower.
            max_retries: Retries per part after the first attempt.
            initial_backoff: Delay before the first retry of a part.
            session_ttl: Overrides the session lifetime set by the target.
        """
        self._target = target
        self._threshold = part_size
        self._part_size = max(part_size, target.min_part_size)
        self._max_retries = max_retries
        self._initial_backoff = initial_backoff
        self._session_ttl = session_ttl

        if self._part_size != part_size:
            logger.warning(
                f"Part size {part_size} below backend minimum, "
                f"using {self._part_size}"
            )

    @property
    def part_size(self) -> int:
        """Return the effective part size."""
        return self._part_size

    def needs_multipart(self, obj: StoreObject) -> bool:
        """Check if an object is large enough for a multipart session."""
        return not obj.is_directory and obj.size > self._threshold

    def upload(
        self,
        obj: StoreObject,
        relative_path: str | None = None,
        metadata: ObjectMetadata | None = None,
        on_progress: Callable[[int, int], None] | None = None,
    ) -> UploadSession:
        """Upload an object through a multipart session.

        Args:
            obj: Source object.
            relative_path: Destination path; defaults to obj.relative_path.
            metadata: Hints stored with the object; built by the target
                from the source object if None.
            on_progress: Optional callback (bytes_sent, total_bytes).

        Returns:
            The completed UploadSession.

        Raises:
            ChecksumError: If the source digest for metadata cannot be computed.
            TransferError: If the session cannot be opened.
            SessionError: If the session failed and was aborted.
        """
        relative_path = relative_path or obj.relative_path
        if metadata is None:
            metadata = self._target.object_metadata(obj)

        try:
            session = self._target.open_session(relative_path, metadata, self._part_size)
        except Exception as e:
            raise TransferError(
                relative_path,
                f"Failed to open upload session for {relative_path}: {e}",
            ) from e

        session.state = SessionState.OPEN
        if self._session_ttl is not None:
            session.expiry = datetime.now(UTC) + self._session_ttl

        logger.info(
            f"Multipart upload of {relative_path}: "
            f"{part_count(obj.size, self._part_size)} parts of {self._part_size} bytes"
        )

        try:
            self._upload_parts(session, obj, on_progress)
            self._complete(session)
        except Exception as e:
            abort_error = self._abort(session)
            if isinstance(e, SessionError):
                if abort_error is None:
                    raise
                raise SessionError(
                    e.path, e.reason, last_error=e.last_error, abort_error=abort_error
                ) from e
            raise SessionError(
                relative_path,
                f"Upload session {session.session_id} for {relative_path} failed",
                last_error=e,
                abort_error=abort_error,
            ) from e
        except BaseException:
            self._abort(session)
            raise

        return session

    def _upload_parts(
        self,
        session: UploadSession,
        obj: StoreObject,
        on_progress: Callable[[int, int], None] | None,
    ) -> None:
        """Stream the object and upload its parts in order."""
        bytes_sent = 0
        with obj.open() as stream:
            session.state = SessionState.UPLOADING
            for part in read_parts(stream, session.part_size):
                self._check_expiry(session)
                tag = self._upload_part(session, part)
                session.add_part(CompletedPart(part_number=part.number, tag=tag))

                bytes_sent += part.size
                logger.debug(
                    f"Part {part.number} complete, "
                    f"{max(obj.size - bytes_sent, 0)} bytes remaining"
                )
                if on_progress:
                    on_progress(bytes_sent, obj.size)

        if bytes_sent != obj.size:
            raise SessionError(
                session.relative_path,
                f"Source size changed during upload: expected {obj.size} bytes, "
                f"read {bytes_sent}",
            )

    def _upload_part(self, session: UploadSession, part: Part) -> str:
        """Upload one part, retrying the identical bytes under a bounded budget."""
        try:
            return retry_with_backoff(
                lambda: self._target.upload_part(session, part.number, part.data),
                max_retries=self._max_retries,
                initial_backoff=self._initial_backoff,
                description=f"Part {part.number} of {session.relative_path}",
            )
        except Exception as e:
            raise SessionError(
                session.relative_path,
                f"Part {part.number} failed after {self._max_retries + 1} attempts",
                last_error=e,
            ) from e

    def _complete(self, session: UploadSession) -> None:
        self._check_expiry(session)
        session.state = SessionState.COMPLETING
        self._target.complete_session(session, list(session.parts))
        session.state = SessionState.COMPLETE
        logger.info(
            f"Completed multipart upload of {session.relative_path} "
            f"({len(session.parts)} parts)"
        )

    def _check_expiry(self, session: UploadSession) -> None:
        if session.expired:
            raise SessionError(
                session.relative_path,
                f"Upload session {session.session_id} expired at "
                f"{session.expiry.isoformat()}",
            )

    def _abort(self, session: UploadSession) -> AbortError | None:
        """Abort a failed session.

        Returns:
            AbortError if the abort itself failed, None otherwise.
        """
        session.state = SessionState.ABORTING
        try:
            self._target.abort_session(session)
        except Exception as e:
            logger.error(f"Abort of upload session {session.session_id} failed: {e}")
            return AbortError(session.session_id, e)
        session.state = SessionState.ABORTED
        logger.warning(
            f"Aborted multipart upload of {session.relative_path} "
            f"after {len(session.parts)} parts"
        )
        return None
