"""Consumer-side interface for whatever draws the batches."""

from __future__ import annotations

from typing import Protocol

from .models import Batch


class RenderSink(Protocol):
    """Receives batches on the consumer thread, in emission order."""

    def render(self, batch: Batch) -> None:  # pragma: no cover - protocol
        ...

    def set_range(self, x_max: float, y_max: float) -> None:  # pragma: no cover - protocol
        ...


__all__ = ["RenderSink"]
