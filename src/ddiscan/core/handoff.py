"""Bounded handoff of batches from the reader thread to the consumer."""

from __future__ import annotations

import logging
import threading
from queue import Empty, Full, Queue

from .models import Batch

logger = logging.getLogger(__name__)

DEFAULT_HANDOFF_SIZE = 8


class BatchChannel:
    """Single-producer/single-consumer queue of :class:`Batch` snapshots.

    ``offer`` never blocks the producer: when the queue is full the oldest
    undelivered batch is dropped. ``drain`` returns batches in emission order.
    """

    def __init__(self, maxsize: int = DEFAULT_HANDOFF_SIZE) -> None:
        if maxsize <= 0:
            raise ValueError("maxsize must be positive")
        self._queue: Queue[Batch] = Queue(maxsize=maxsize)
        self._dropped = 0
        self._lock = threading.Lock()

    @property
    def dropped(self) -> int:
        with self._lock:
            return self._dropped

    def offer(self, batch: Batch) -> None:
        try:
            self._queue.put_nowait(batch)
            return
        except Full:
            pass
        try:
            stale = self._queue.get_nowait()
        except Empty:
            stale = None
        if stale is not None:
            with self._lock:
                self._dropped += 1
            logger.debug("Consumer lagging; dropped batch #%d", stale.sequence)
        self._queue.put_nowait(batch)

    def drain(self) -> list[Batch]:
        items: list[Batch] = []
        while True:
            try:
                items.append(self._queue.get_nowait())
            except Empty:
                break
        return items

    def clear(self) -> None:
        self.drain()


__all__ = ["DEFAULT_HANDOFF_SIZE", "BatchChannel"]
