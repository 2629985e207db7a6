from __future__ import annotations

"""
Blocking read loop that turns serial chunks into plot batches.

The loop runs on one dedicated worker thread per connection. It is the only
writer of the pipeline state and hands finished batches to the consumer via a
callback (normally :meth:`BatchChannel.offer`).
"""

import logging
import threading
from dataclasses import dataclass
from typing import Callable, Optional

from .errors import LinkFault
from .link import LinkSlot
from .models import Batch
from .pipeline import ScanPipeline

logger = logging.getLogger(__name__)

DEFAULT_READ_SIZE = 1024
DEFAULT_READ_TIMEOUT_S = 0.2

BatchCallback = Callable[[Batch], None]
FaultCallback = Callable[[LinkFault], None]


def reader_loop(
    slot: LinkSlot,
    pipeline: ScanPipeline,
    emit: BatchCallback,
    *,
    on_fault: Optional[FaultCallback] = None,
    read_size: int = DEFAULT_READ_SIZE,
    read_timeout_s: float = DEFAULT_READ_TIMEOUT_S,
    stop_event: Optional[threading.Event] = None,
) -> None:
    """Read from the link in *slot* until it is emptied or a read fails.

    A :class:`LinkFault` ends the loop and is passed to *on_fault*; that is
    the only way a read error reaches the connection state machine. Any other
    exception is a bug and propagates.
    """
    while True:
        if stop_event is not None and stop_event.is_set():
            break
        link = slot.get()
        if link is None:
            break

        try:
            chunk = link.read(read_size, read_timeout_s)
        except LinkFault as exc:
            logger.warning("Serial read failed: %s", exc)
            if on_fault is not None:
                on_fault(exc)
            break

        if not chunk:
            continue

        for batch in pipeline.feed(chunk):
            emit(batch)

    logger.debug("Reader loop finished (%s)", pipeline.stats)


@dataclass
class StreamReaderHandle:
    thread: threading.Thread
    stop_event: threading.Event
    pipeline: ScanPipeline

    def stop(self, *, join: bool = False, timeout: Optional[float] = None) -> None:
        self.stop_event.set()
        if join and self.thread is not threading.current_thread():
            self.thread.join(timeout)

    def is_alive(self) -> bool:
        return self.thread.is_alive()


def start_reader(
    slot: LinkSlot,
    emit: BatchCallback,
    *,
    pipeline: Optional[ScanPipeline] = None,
    on_fault: Optional[FaultCallback] = None,
    read_size: int = DEFAULT_READ_SIZE,
    read_timeout_s: float = DEFAULT_READ_TIMEOUT_S,
    thread_name: Optional[str] = None,
) -> StreamReaderHandle:
    """
    Start a background thread that reads the link held by *slot*.
    """

    pipe = pipeline or ScanPipeline()
    stop_event = threading.Event()

    def _target() -> None:
        try:
            reader_loop(
                slot,
                pipe,
                emit,
                on_fault=on_fault,
                read_size=read_size,
                read_timeout_s=read_timeout_s,
                stop_event=stop_event,
            )
        except Exception:
            logger.exception("Reader thread crashed")
            raise

    thread = threading.Thread(
        target=_target,
        name=thread_name or "DDiScanStreamReader",
        daemon=True,
    )
    thread.start()
    return StreamReaderHandle(thread=thread, stop_event=stop_event, pipeline=pipe)


__all__ = [
    "DEFAULT_READ_SIZE",
    "DEFAULT_READ_TIMEOUT_S",
    "reader_loop",
    "StreamReaderHandle",
    "start_reader",
]
