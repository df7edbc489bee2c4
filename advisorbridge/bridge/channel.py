"""Closable single-consumer channel between the caller and stream workers."""

from __future__ import annotations

import queue
import threading
from typing import Generic, TypeVar

T = TypeVar("T")

_CLOSED = object()


class ChannelClosed(Exception):
    """Raised on send to, or receive from, a closed and drained channel."""


class ChannelTimeout(Exception):
    """Raised when a bounded receive elapses with nothing delivered."""


class Channel(Generic[T]):
    """Unbounded FIFO that either side can close.

    Messages queued before close() are still delivered; after they are
    drained every receive raises ChannelClosed.
    """

    def __init__(self, name: str):
        self.name = name
        self._queue: queue.Queue[object] = queue.Queue()
        self._closed = threading.Event()

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def send(self, item: T) -> None:
        if self._closed.is_set():
            raise ChannelClosed(f"{self.name} channel is closed")
        self._queue.put(item)

    def close(self) -> None:
        if self._closed.is_set():
            return
        self._closed.set()
        # Wakes a receiver blocked on an empty queue.
        self._queue.put(_CLOSED)

    def recv(self, timeout: float | None = None) -> T:
        try:
            item = self._queue.get(timeout=timeout)
        except queue.Empty as exc:
            raise ChannelTimeout(f"{self.name} channel receive timed out") from exc
        if item is _CLOSED:
            # Keep the marker for any later receiver.
            self._queue.put(_CLOSED)
            raise ChannelClosed(f"{self.name} channel is closed")
        return item  # type: ignore[return-value]

    def try_recv(self) -> T | None:
        """Return the next queued item without blocking, or None."""
        try:
            item = self._queue.get_nowait()
        except queue.Empty:
            return None
        if item is _CLOSED:
            self._queue.put(_CLOSED)
            return None
        return item  # type: ignore[return-value]

    def drain(self) -> list[T]:
        """Remove and return every immediately available item."""
        items: list[T] = []
        while True:
            item = self.try_recv()
            if item is None:
                return items
            items.append(item)
