"""Tests for bounded retry."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest

from bucketsync.sync.retry import AttemptState, RetryBudget, retry_with_backoff


class TestRetryBudget:
    """Tests for the attempt state machine."""

    def test_retry_until_exhausted(self) -> None:
        """Failures retry until the budget is spent."""
        budget = RetryBudget(max_retries=2, initial_backoff=0)
        assert budget.total_attempts == 3
        assert budget.failed(OSError()) == AttemptState.RETRY
        assert budget.failed(OSError()) == AttemptState.RETRY
        assert budget.failed(OSError()) == AttemptState.EXHAUSTED
        assert budget.attempts == 3

    def test_success(self) -> None:
        """A success ends the sequence."""
        budget = RetryBudget(max_retries=2, initial_backoff=0)
        budget.failed(OSError())
        budget.succeeded()
        assert budget.state == AttemptState.SUCCESS
        assert budget.attempts == 2

    def test_keeps_last_error(self) -> None:
        """The most recent failure is remembered."""
        budget = RetryBudget(max_retries=1, initial_backoff=0)
        budget.failed(OSError("first"))
        error = OSError("second")
        budget.failed(error)
        assert budget.last_error is error

    def test_backoff_grows_and_caps(self) -> None:
        """Backoff doubles up to the maximum."""
        budget = RetryBudget(initial_backoff=1.0, max_backoff=3.0)
        with patch("bucketsync.sync.retry.time.sleep") as sleep:
            budget.wait()
            budget.wait()
            budget.wait()
        assert [c.args[0] for c in sleep.call_args_list] == [1.0, 2.0, 3.0]


class TestRetryWithBackoff:
    """Tests for retry_with_backoff."""

    def test_returns_result(self) -> None:
        """A successful call returns its result."""
        assert retry_with_backoff(lambda: 42, initial_backoff=0) == 42

    def test_retries_then_succeeds(self) -> None:
        """A transient failure is retried."""
        func = MagicMock(side_effect=[ConnectionError(), "ok"])
        assert retry_with_backoff(func, initial_backoff=0) == "ok"
        assert func.call_count == 2

    def test_raises_last_error(self) -> None:
        """After max_retries + 1 attempts the last error propagates."""
        func = MagicMock(side_effect=[ConnectionError("1"), ConnectionError("2")])
        with pytest.raises(ConnectionError, match="2"):
            retry_with_backoff(func, max_retries=1, initial_backoff=0)
        assert func.call_count == 2

    def test_non_retryable_propagates(self) -> None:
        """Exceptions outside retryable_exceptions are not retried."""
        func = MagicMock(side_effect=ValueError("bad"))
        with pytest.raises(ValueError):
            retry_with_backoff(
                func, initial_backoff=0, retryable_exceptions=(ConnectionError,)
            )
        assert func.call_count == 1
