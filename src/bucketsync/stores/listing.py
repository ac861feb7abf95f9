"""Lazy store enumeration backed by a background producer.

This module provides:
- Listing: Single-pass iterator fed by a producer thread through a bounded queue
- ListingResult: Outcome of a fully drained listing

A listing surfaces enumeration failure only once it has been drained: the
sequence simply ends early and result() reports the error.
"""

from __future__ import annotations

import logging
import queue
import threading
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass
from typing import TYPE_CHECKING

from bucketsync.core.errors import EnumerationError

if TYPE_CHECKING:
    from bucketsync.stores.base import StoreObject

logger = logging.getLogger(__name__)

DEFAULT_BUFFER_SIZE = 1000
PUT_TIMEOUT = 0.1  # seconds between checks for an abandoned listing

_END = object()


@dataclass(frozen=True)
class ListingResult:
    """Outcome of a drained listing.

    Attributes:
        count: Number of objects produced.
        error: Enumeration failure, None if the listing completed.
    """

    count: int
    error: EnumerationError | None = None

    @property
    def ok(self) -> bool:
        """Check if the listing completed without error."""
        return self.error is None

    def raise_for_error(self) -> None:
        """Raise the enumeration error, if any."""
        if self.error is not None:
            raise self.error


class Listing(Iterator["StoreObject"]):
    """Single-pass, lazily started enumeration of a store.

    The producer runs on a daemon thread started by the first call to
    next(), pushing objects into a bounded queue so a slow consumer
    throttles directory walks and paginated listings.

    Usage:
        listing = store.files()
        for obj in listing:
            ...
        listing.result().raise_for_error()
    """

    def __init__(
        self,
        location: str,
        producer: Callable[[], Iterable[StoreObject]],
        buffer_size: int = DEFAULT_BUFFER_SIZE,
    ) -> None:
        """Initialize the listing.

        Args:
            location: Root location of the store, used in error messages.
            producer: Callable returning the objects to enumerate.
            buffer_size: Capacity of the queue between producer and consumer.
        """
        self._location = location
        self._producer = producer
        self._queue: queue.Queue[object] = queue.Queue(maxsize=buffer_size)
        self._closed = threading.Event()
        self._thread: threading.Thread | None = None
        self._error: EnumerationError | None = None
        self._count = 0
        self._drained = False

    @property
    def location(self) -> str:
        """Return the root location of the listed store."""
        return self._location

    @property
    def drained(self) -> bool:
        """Check if the consumer has reached the end of the sequence."""
        return self._drained

    def __iter__(self) -> Listing:
        return self

    def __next__(self) -> StoreObject:
        if self._drained or self._closed.is_set():
            raise StopIteration

        if self._thread is None:
            self._start()

        item = self._queue.get()
        if item is _END:
            self._drained = True
            if self._thread is not None:
                self._thread.join()
            raise StopIteration

        self._count += 1
        return item  # type: ignore[return-value]

    def result(self) -> ListingResult:
        """Return the outcome of the listing.

        Returns:
            ListingResult with the object count and enumeration error.

        Raises:
            RuntimeError: If the listing has not been fully drained.
        """
        if not self._drained:
            raise RuntimeError(
                f"Listing of {self._location} must be drained before reading its result"
            )
        return ListingResult(count=self._count, error=self._error)

    def close(self) -> None:
        """Abandon the listing and release the producer thread."""
        self._closed.set()
        while True:
            try:
                self._queue.get_nowait()
            except queue.Empty:
                break
        if self._thread is not None:
            self._thread.join(timeout=1.0)

    def _start(self) -> None:
        self._thread = threading.Thread(
            target=self._produce,
            name=f"Listing-{self._location}",
            daemon=True,
        )
        self._thread.start()

    def _produce(self) -> None:
        """Producer thread body."""
        try:
            for obj in self._producer():
                if not self._put(obj):
                    logger.debug(f"Listing of {self._location} abandoned")
                    return
        except Exception as e:
            logger.error(f"Listing of {self._location} failed: {e}")
            self._error = EnumerationError(self._location, e)
        finally:
            self._put(_END)

    def _put(self, item: object) -> bool:
        while not self._closed.is_set():
            try:
                self._queue.put(item, timeout=PUT_TIMEOUT)
                return True
            except queue.Full:
                continue
        return False
