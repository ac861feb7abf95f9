"""Tests for worker classes."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock

from bucketsync.core.errors import SessionError, TransferError
from bucketsync.stores.local import LocalStore
from bucketsync.sync.multipart import MultipartUploader
from bucketsync.sync.types import SyncAction
from bucketsync.sync.workers import (
    BaseWorker,
    CopyWorker,
    DeleteWorker,
    WorkerContext,
    WorkerResult,
)
from tests.fakes import MemoryObject, MemoryStore


class TestWorkerResult:
    """Tests for WorkerResult dataclass."""

    def test_create_success_result(self) -> None:
        """Should create a success result."""
        result = WorkerResult(success=True, result="test_value")
        assert result.success is True
        assert result.result == "test_value"
        assert result.error is None


class TestBaseWorker:
    """Tests for BaseWorker.execute."""

    class EchoWorker(BaseWorker):
        def __init__(self, error: Exception | None = None) -> None:
            super().__init__()
            self.error = error

        @property
        def worker_type(self) -> str:
            return "echo"

        def _do_work(self, ctx: WorkerContext) -> str:
            if self.error is not None:
                raise self.error
            return ctx.action.path

    def test_success(self) -> None:
        """A successful run returns the work result."""
        worker = self.EchoWorker()
        result = worker.execute(SyncAction.delete("p"))
        assert result.success
        assert result.result == "p"

    def test_failure_wrapped_in_transfer_error(self) -> None:
        """Arbitrary exceptions come back as TransferError."""
        worker = self.EchoWorker(OSError("disk full"))
        result = worker.execute(SyncAction.delete("p"))
        assert not result.success
        assert isinstance(result.error, TransferError)
        assert result.error.path == "p"
        assert isinstance(result.error.__cause__, OSError)

    def test_transfer_error_kept(self) -> None:
        """TransferError subclasses are returned unchanged."""
        error = SessionError("p", "part failed")
        result = self.EchoWorker(error).execute(SyncAction.delete("p"))
        assert result.error is error


class TestCopyWorker:
    """Tests for CopyWorker."""

    def test_small_object_single_write(self) -> None:
        """Objects up to the part size are written with create()."""
        store = MemoryStore()
        uploader = MultipartUploader(store, part_size=10, initial_backoff=0)
        action = SyncAction.copy(MemoryObject("f", b"1234"), "g")

        result = CopyWorker(store, uploader).execute(action)

        assert result.success
        assert result.result == "single"
        assert store.data("g") == b"1234"
        assert store.part_calls == []

    def test_large_object_multipart(self) -> None:
        """Objects above the part size go through an upload session."""
        store = MemoryStore()
        uploader = MultipartUploader(store, part_size=4, initial_backoff=0)
        action = SyncAction.copy(MemoryObject("f", b"123456789"))

        result = CopyWorker(store, uploader).execute(action)

        assert result.result == "multipart"
        assert store.data("f") == b"123456789"
        assert len(store.part_calls) == 3

    def test_without_uploader(self) -> None:
        """No uploader means every copy is a single write."""
        store = MemoryStore()
        result = CopyWorker(store).execute(SyncAction.copy(MemoryObject("f", b"x" * 100)))
        assert result.result == "single"

    def test_create_failure(self) -> None:
        """A failing write is reported as TransferError."""
        store = MemoryStore()
        store.fail_create = {"f"}
        result = CopyWorker(store).execute(SyncAction.copy(MemoryObject("f", b"x")))
        assert not result.success
        assert isinstance(result.error, TransferError)
        assert "cannot write f" in str(result.error)

    def test_progress_reported(self) -> None:
        """Single writes report completion through the callback."""
        progress = MagicMock()
        CopyWorker(MemoryStore()).execute(
            SyncAction.copy(MemoryObject("f", b"abc")), on_progress=progress
        )
        progress.assert_called_once_with(3, 3)


class TestDeleteWorker:
    """Tests for DeleteWorker."""

    def test_delete(self) -> None:
        """Deletes the action's path."""
        store = MemoryStore()
        store.put("f", b"x")
        result = DeleteWorker(store).execute(SyncAction.delete("f"))
        assert result.success
        assert "f" not in store.objects

    def test_delete_failure(self) -> None:
        """A failing delete is reported, not raised."""
        store = MemoryStore()
        store.fail_delete = {"f"}
        result = DeleteWorker(store).execute(SyncAction.delete("f"))
        assert not result.success
        assert result.error.path == "f"

    def test_delete_prunes_emptied_directories(self, tmp_path: Path) -> None:
        """Directories emptied by the delete are removed up to the boundary."""
        (tmp_path / "a" / "b").mkdir(parents=True)
        (tmp_path / "a" / "b" / "f").write_bytes(b"x")

        result = DeleteWorker(LocalStore(tmp_path)).execute(
            SyncAction.delete("a/b/f", prune_boundary="a/")
        )

        assert result.success
        assert list((tmp_path / "a").iterdir()) == []

    def test_worker_type(self) -> None:
        """Worker types name the action kind."""
        assert DeleteWorker(MemoryStore()).worker_type == "delete"
        assert CopyWorker(MemoryStore()).worker_type == "copy"

