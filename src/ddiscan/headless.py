"""Run the acquisition loop without Qt and log every batch instead of drawing it."""

from __future__ import annotations

import logging
import threading
import time
from typing import Optional

from .config import ScanConfig
from .core.connection import ConnectionState
from .core.models import Batch
from .core.sinks import RenderSink
from .core.wiring import build_session
from .link import DevicePresenceMonitor, SerialDeviceProvider

logger = logging.getLogger(__name__)


class LoggingSink:
    """Render sink that summarises each batch on the log."""

    def __init__(self) -> None:
        self.x_max: Optional[float] = None
        self.y_max: Optional[float] = None
        self.rendered = 0

    def render(self, batch: Batch) -> None:
        self.rendered += 1
        if not batch.points:
            return
        signal = batch.points[1::2]
        peak = max(signal, key=lambda p: p.value)
        logger.info(
            "batch #%d: %d points, distance %.1f-%.1f mm, peak %.1f at %.1f mm",
            batch.sequence,
            len(batch),
            min(p.distance_mm for p in signal),
            max(p.distance_mm for p in signal),
            peak.value,
            peak.distance_mm,
        )

    def set_range(self, x_max: float, y_max: float) -> None:
        self.x_max = x_max
        self.y_max = y_max


def run_headless(
    cfg: ScanConfig,
    *,
    sink: Optional[RenderSink] = None,
    duration_s: Optional[float] = None,
) -> int:
    """
    Connect once, forward batches to *sink* until the link goes away.

    Returns a process exit code: 0 after a clean session, 1 when no session
    could be established.
    """
    cfg = cfg.sanitized()
    sink = sink or LoggingSink()
    sink.set_range(cfg.x_max, cfg.y_max)

    wake = threading.Event()
    provider = SerialDeviceProvider(
        cfg.port,
        include_non_usb=cfg.include_non_usb,
        timeout_s=cfg.read_timeout_s,
    )
    presence = DevicePresenceMonitor(provider.discover, interval_s=cfg.presence_poll_s)
    handles = build_session(cfg, provider, presence=presence, wakeup=wake.set)
    manager, channel = handles.manager, handles.channel

    manager.discover()
    poll_s = cfg.render_interval_ms / 1000.0
    deadline = time.monotonic() + duration_s if duration_s else None
    was_connected = False

    try:
        while True:
            wake.wait(poll_s)
            wake.clear()
            manager.process_events()
            for batch in channel.drain():
                sink.render(batch)

            if manager.state is ConnectionState.CONNECTED:
                was_connected = True
            elif manager.state is ConnectionState.DISCONNECTED:
                logger.info("Status: %s", manager.status)
                break
            if deadline is not None and time.monotonic() >= deadline:
                logger.info("Capture duration reached")
                break
    except KeyboardInterrupt:
        logger.info("Interrupted")
    finally:
        manager.disconnect()
        if channel.dropped:
            logger.warning("Dropped %d batches while the consumer lagged", channel.dropped)

    return 0 if was_connected else 1


__all__ = ["LoggingSink", "run_headless"]
