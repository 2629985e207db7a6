"""Background watcher that reports when the tracked serial device disappears."""

from __future__ import annotations

import logging
import threading
from typing import Callable, List, Optional

from ..core.connection import DeviceDetached, EventSink
from ..core.models import Device

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL_S = 1.0


class DevicePresenceMonitor:
    """Poll *discover* while a device is tracked; post :class:`DeviceDetached` once it is gone."""

    def __init__(
        self,
        discover: Callable[[], List[Device]],
        *,
        interval_s: float = DEFAULT_POLL_INTERVAL_S,
    ) -> None:
        self._discover = discover
        self._interval_s = max(0.01, float(interval_s))
        self._post: Optional[EventSink] = None
        self._thread: Optional[threading.Thread] = None
        self._stop_event: Optional[threading.Event] = None

    def set_event_sink(self, post: EventSink) -> None:
        self._post = post

    def is_watching(self) -> bool:
        thread = self._thread
        return thread is not None and thread.is_alive()

    def watch(self, device: Device) -> None:
        self.unwatch()
        stop_event = threading.Event()
        thread = threading.Thread(
            target=self._run,
            args=(device, stop_event),
            name="DDiScanPresenceMonitor",
            daemon=True,
        )
        self._stop_event = stop_event
        self._thread = thread
        thread.start()

    def unwatch(self) -> None:
        if self._stop_event is not None:
            self._stop_event.set()
        self._stop_event = None
        self._thread = None

    def _run(self, device: Device, stop_event: threading.Event) -> None:
        while not stop_event.wait(self._interval_s):
            try:
                present = device in self._discover()
            except Exception:
                logger.exception("Device enumeration failed")
                continue
            if present:
                continue
            if stop_event.is_set():
                return
            logger.info("%s is no longer present", device)
            if self._post is not None:
                self._post(DeviceDetached(device))
            return


__all__ = ["DEFAULT_POLL_INTERVAL_S", "DevicePresenceMonitor"]
