from __future__ import annotations

import logging
from typing import Optional

from PySide6.QtCore import QObject, Qt, QTimer, Signal, Slot

from ..config import ScanConfig
from ..core.connection import ConnectionManager, ConnectionState
from ..core.handoff import BatchChannel
from ..core.sinks import RenderSink
from ..core.wiring import build_session
from ..link import DevicePresenceMonitor, SerialDeviceProvider

logger = logging.getLogger(__name__)


class ConnectionController(QObject):
    """Non-visual controller that owns the connection manager on the GUI thread.

    Events posted from worker threads wake the GUI thread through a queued
    signal; a timer drains the batch channel into the render sink in order.
    """

    status_changed = Signal(str, bool)  # text, connected
    state_changed = Signal(object)  # ConnectionState
    _events_posted = Signal()

    def __init__(
        self,
        cfg: ScanConfig,
        sink: RenderSink,
        *,
        manager: Optional[ConnectionManager] = None,
        channel: Optional[BatchChannel] = None,
        parent: Optional[QObject] = None,
    ) -> None:
        super().__init__(parent)
        self._cfg = cfg.sanitized()
        self._sink = sink

        if manager is None:
            provider = SerialDeviceProvider(
                self._cfg.port,
                include_non_usb=self._cfg.include_non_usb,
                timeout_s=self._cfg.read_timeout_s,
            )
            presence = DevicePresenceMonitor(provider.discover, interval_s=self._cfg.presence_poll_s)
            handles = build_session(self._cfg, provider, presence=presence, channel=channel)
            manager, channel = handles.manager, handles.channel
        elif channel is None:
            raise ValueError("channel is required when a manager is supplied")

        self._manager = manager
        self._channel = channel
        self._events_posted.connect(self._process_events, Qt.QueuedConnection)
        self._manager.set_wakeup(self._events_posted.emit)
        self._manager.add_listener(self._on_state_changed)

        self._render_timer = QTimer(self)
        self._render_timer.setInterval(self._cfg.render_interval_ms)
        self._render_timer.timeout.connect(self._drain_batches)

    # --------------------------------------------------------------- queries
    @property
    def manager(self) -> ConnectionManager:
        return self._manager

    def is_connected(self) -> bool:
        return self._manager.is_connected()

    # --------------------------------------------------------------- commands
    @Slot()
    def toggle(self) -> None:
        self._manager.toggle()

    @Slot()
    def connect_device(self) -> None:
        self._manager.discover()

    @Slot()
    def disconnect_device(self) -> None:
        self._manager.disconnect()

    def shutdown(self) -> None:
        self._manager.disconnect()
        self._render_timer.stop()
        self._channel.clear()

    # --------------------------------------------------------------- callbacks
    @Slot()
    def _process_events(self) -> None:
        self._manager.process_events()

    @Slot()
    def _drain_batches(self) -> None:
        for batch in self._channel.drain():
            self._sink.render(batch)

    def _on_state_changed(self, state: ConnectionState, status: str) -> None:
        logger.info("Connection %s: %s", state.value, status)
        connected = state is ConnectionState.CONNECTED
        if connected:
            self._channel.clear()
            self._render_timer.start()
        elif state is ConnectionState.DISCONNECTED:
            self._render_timer.stop()
            # Batches already produced by the finished session still get drawn.
            self._drain_batches()
        self.state_changed.emit(state)
        self.status_changed.emit(status, connected)


__all__ = ["ConnectionController"]
