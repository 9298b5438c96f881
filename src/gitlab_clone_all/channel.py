"""
Bounded FIFO channel connecting the pipeline stages.
"""

import queue
from typing import Generic, Iterator, TypeVar

T = TypeVar('T')

_CLOSED = object()


class Channel(Generic[T]):
    """
    A bounded queue that senders can close.

    send() blocks while the channel is full, which is how a slow consumer
    throttles its producers. Iterating yields items until close() is seen.
    A channel is closed once, by the side that owns the producing end.
    """

    def __init__(self, capacity: int = 500):
        if capacity < 1:
            raise ValueError(f"Channel capacity must be positive, got {capacity}")
        self.capacity = capacity
        self._queue: 'queue.Queue' = queue.Queue(maxsize=capacity)
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def send(self, item: T) -> None:
        if self._closed:
            raise RuntimeError("send on closed channel")
        self._queue.put(item)

    def close(self) -> None:
        if not self._closed:
            self._closed = True
            self._queue.put(_CLOSED)

    def __iter__(self) -> Iterator[T]:
        while True:
            item = self._queue.get()
            if item is _CLOSED:
                # leave the marker for any other receiver
                self._queue.put(_CLOSED)
                return
            yield item
