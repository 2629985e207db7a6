from __future__ import annotations

from .models import Batch, Point

DEFAULT_BATCH_SIZE = 300


class Batcher:
    """Accumulate converted points and cut them into fixed-size batches.

    Both points of a record are pushed together, so a batch never splits a
    record. The accumulator is private to the ingestion thread; callers only
    ever see the immutable :class:`Batch` snapshots.
    """

    def __init__(self, batch_size: int = DEFAULT_BATCH_SIZE) -> None:
        if batch_size <= 0:
            raise ValueError("batch_size must be positive")
        self._batch_size = int(batch_size)
        self._points: list[Point] = []
        self._sequence = 0

    @property
    def batch_size(self) -> int:
        return self._batch_size

    @property
    def pending(self) -> int:
        return len(self._points)

    def push(self, baseline: Point, signal: Point) -> None:
        self._points.append(baseline)
        self._points.append(signal)

    def drain_if_ready(self) -> Batch | None:
        """Return a batch and clear the accumulator once the threshold is met."""
        if len(self._points) < self._batch_size:
            return None
        batch = Batch(points=tuple(self._points), sequence=self._sequence)
        self._sequence += 1
        self._points.clear()
        return batch


__all__ = ["DEFAULT_BATCH_SIZE", "Batcher"]
