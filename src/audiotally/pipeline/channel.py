"""Closable FIFO channel shared between threads."""

from __future__ import annotations

import queue
import threading
from typing import Generic, Iterator, TypeVar

from audiotally.errors import ChannelClosedError

T = TypeVar("T")

_CLOSED = object()


class Channel(Generic[T]):
    """A ``queue.Queue`` with close semantics.

    Receivers iterate until the channel is closed and drained. Closing puts a
    single marker on the queue; each receiver that meets it puts it back so
    every other receiver sees the close as well. Capacity is one slot larger
    than requested to leave room for the marker.
    """

    def __init__(self, capacity: int = 0) -> None:
        self._queue: queue.Queue = queue.Queue(maxsize=capacity + 1 if capacity > 0 else 0)
        self._lock = threading.Lock()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def send(self, item: T) -> None:
        with self._lock:
            if self._closed:
                raise ChannelClosedError("send on closed channel")
            self._queue.put(item)

    def close(self) -> None:
        with self._lock:
            if self._closed:
                raise ChannelClosedError("channel already closed")
            self._closed = True
            self._queue.put(_CLOSED)

    def receive(self) -> tuple[T | None, bool]:
        """Block for the next item; ``(None, False)`` once closed and drained."""
        item = self._queue.get()
        if item is _CLOSED:
            self._queue.put(_CLOSED)
            return None, False
        return item, True

    def __iter__(self) -> Iterator[T]:
        while True:
            item, ok = self.receive()
            if not ok:
                return
            yield item
