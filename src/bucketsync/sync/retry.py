"""Bounded retry with exponential backoff.

This module provides:
- AttemptState: States of the per-attempt machine
- RetryBudget: Attempt → Success | Retry(n < budget) | Exhausted
- retry_with_backoff: Run a callable under a RetryBudget
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum, auto
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Default retry configuration
DEFAULT_MAX_RETRIES = 2
DEFAULT_INITIAL_BACKOFF = 1.0  # seconds
DEFAULT_MAX_BACKOFF = 30.0  # seconds
DEFAULT_BACKOFF_MULTIPLIER = 2.0


class AttemptState(Enum):
    """State of a bounded retry sequence."""

    ATTEMPT = auto()
    SUCCESS = auto()
    RETRY = auto()
    EXHAUSTED = auto()


@dataclass
class RetryBudget:
    """Bounded attempt state machine.

    The first attempt is free; `max_retries` further attempts follow
    failures. After the last failed attempt the machine is EXHAUSTED.

    Attributes:
        max_retries: Retries allowed after the first attempt.
        initial_backoff: Delay before the first retry in seconds.
        max_backoff: Upper bound for the delay.
        backoff_multiplier: Growth factor of the delay per retry.
    """

    max_retries: int = DEFAULT_MAX_RETRIES
    initial_backoff: float = DEFAULT_INITIAL_BACKOFF
    max_backoff: float = DEFAULT_MAX_BACKOFF
    backoff_multiplier: float = DEFAULT_BACKOFF_MULTIPLIER
    state: AttemptState = AttemptState.ATTEMPT
    attempts: int = 0
    backoff: float = 0.0
    last_error: Exception | None = None

    def __post_init__(self) -> None:
        self.backoff = self.initial_backoff

    @property
    def total_attempts(self) -> int:
        """Return the number of attempts the budget allows."""
        return self.max_retries + 1

    def succeeded(self) -> None:
        """Record a successful attempt."""
        self.attempts += 1
        self.state = AttemptState.SUCCESS

    def failed(self, error: Exception) -> AttemptState:
        """Record a failed attempt.

        Returns:
            RETRY if attempts remain, EXHAUSTED otherwise.
        """
        self.attempts += 1
        self.last_error = error
        if self.attempts >= self.total_attempts:
            self.state = AttemptState.EXHAUSTED
        else:
            self.state = AttemptState.RETRY
        return self.state

    def wait(self) -> None:
        """Sleep before the next attempt and grow the backoff."""
        if self.backoff > 0:
            time.sleep(self.backoff)
        self.backoff = min(self.backoff * self.backoff_multiplier, self.max_backoff)
        self.state = AttemptState.ATTEMPT


def retry_with_backoff(
    func: Callable[[], T],
    max_retries: int = DEFAULT_MAX_RETRIES,
    initial_backoff: float = DEFAULT_INITIAL_BACKOFF,
    max_backoff: float = DEFAULT_MAX_BACKOFF,
    backoff_multiplier: float = DEFAULT_BACKOFF_MULTIPLIER,
    retryable_exceptions: tuple[type[Exception], ...] = (Exception,),
    description: str = "operation",
) -> T:
    """Execute a function with exponential backoff retry.

    Args:
        func: Function to execute.
        max_retries: Maximum number of retry attempts.
        initial_backoff: Initial backoff time in seconds.
        max_backoff: Maximum backoff time in seconds.
        backoff_multiplier: Multiplier for each retry.
        retryable_exceptions: Tuple of exception types to retry on.
        description: Name of the operation for log messages.

    Returns:
        Result of the function.

    Raises:
        The last exception if all retries fail.
    """
    budget = RetryBudget(
        max_retries=max_retries,
        initial_backoff=initial_backoff,
        max_backoff=max_backoff,
        backoff_multiplier=backoff_multiplier,
    )

    while True:
        try:
            result = func()
        except retryable_exceptions as e:
            if budget.failed(e) == AttemptState.EXHAUSTED:
                logger.error(
                    f"{description}: all {budget.total_attempts} attempts failed: {e}"
                )
                raise
            logger.warning(
                f"{description}: attempt {budget.attempts}/{budget.total_attempts} "
                f"failed: {e}. Retrying in {budget.backoff:.1f}s..."
            )
            budget.wait()
        else:
            budget.succeeded()
            return result
