"""Connection lifecycle state machine for the serial ranging sensor.

All asynchronous inputs (permission results, detach notifications, reader
faults) are posted as messages and applied by :meth:`ConnectionManager.process_events`
on the thread that owns the manager. ``discover``, ``disconnect`` and
``toggle`` must be called from that same thread.
"""

from __future__ import annotations

import logging
import queue
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Protocol, Union

from .errors import LinkFault, OpenFailed
from .link import Link, LinkSlot
from .models import Device, PermissionStatus

logger = logging.getLogger(__name__)

STATUS_NO_DEVICE = "No device"
STATUS_AWAITING_PERMISSION = "Awaiting permission"
STATUS_CONNECTING = "Connecting"
STATUS_CONNECTED = "Connected"
STATUS_DISCONNECTED = "Disconnected"
STATUS_OPEN_FAILED = "Open failed"
STATUS_READ_FAULT = "Read fault"


class ConnectionState(Enum):
    DISCONNECTED = "disconnected"
    AWAITING_PERMISSION = "awaiting_permission"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    FAULTED = "faulted"


# --------------------------------------------------------------------- events
@dataclass(frozen=True)
class PermissionResult:
    device: Device
    granted: bool


@dataclass(frozen=True)
class DeviceDetached:
    device: Device


@dataclass(frozen=True)
class ReadFault:
    session: int
    error: Optional[LinkFault] = None


@dataclass(frozen=True)
class DisconnectRequested:
    pass


@dataclass(frozen=True)
class OpenDevice:
    device: Device


Event = Union[PermissionResult, DeviceDetached, ReadFault, DisconnectRequested, OpenDevice]
EventSink = Callable[[Event], None]


# ------------------------------------------------------------- collaborators
class DeviceProvider(Protocol):
    """Discovery, permission and open operations of the host platform."""

    def set_event_sink(self, post: EventSink) -> None:  # pragma: no cover - protocol
        ...

    def discover(self) -> List[Device]:  # pragma: no cover - protocol
        ...

    def has_permission(self, device: Device) -> bool:  # pragma: no cover - protocol
        ...

    def request_permission(self, device: Device) -> None:  # pragma: no cover - protocol
        ...

    def open(self, device: Device) -> Link:  # pragma: no cover - protocol
        ...


class ReaderHandle(Protocol):
    def stop(self, *, join: bool = False, timeout: Optional[float] = None) -> None:  # pragma: no cover
        ...


class PresenceWatcher(Protocol):
    def set_event_sink(self, post: EventSink) -> None:  # pragma: no cover - protocol
        ...

    def watch(self, device: Device) -> None:  # pragma: no cover - protocol
        ...

    def unwatch(self) -> None:  # pragma: no cover - protocol
        ...


ReaderFactory = Callable[[LinkSlot, Callable[[LinkFault], None]], ReaderHandle]
StateListener = Callable[[ConnectionState, str], None]


class ConnectionManager:
    """Drive discovery, permission, open and teardown of one serial device."""

    def __init__(
        self,
        provider: DeviceProvider,
        reader_factory: ReaderFactory,
        *,
        presence: Optional[PresenceWatcher] = None,
        wakeup: Optional[Callable[[], None]] = None,
    ) -> None:
        self._provider = provider
        self._reader_factory = reader_factory
        self._presence = presence
        self._wakeup = wakeup

        self._events: queue.Queue[Event] = queue.Queue()
        self._listeners: List[StateListener] = []

        self._state = ConnectionState.DISCONNECTED
        self._status = STATUS_DISCONNECTED
        self._device: Optional[Device] = None
        self._slot = LinkSlot()
        self._reader: Optional[ReaderHandle] = None
        self._session = 0

        provider.set_event_sink(self.post)
        if presence is not None:
            presence.set_event_sink(self.post)

    # ------------------------------------------------------------------ queries
    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def status(self) -> str:
        return self._status

    @property
    def device(self) -> Optional[Device]:
        return self._device

    @property
    def session(self) -> int:
        return self._session

    @property
    def slot(self) -> LinkSlot:
        return self._slot

    def is_connected(self) -> bool:
        return self._state is ConnectionState.CONNECTED

    def add_listener(self, listener: StateListener) -> None:
        self._listeners.append(listener)

    def set_wakeup(self, wakeup: Optional[Callable[[], None]]) -> None:
        self._wakeup = wakeup

    # ------------------------------------------------------------------ messages
    def post(self, event: Event) -> None:
        """Queue *event* for the owner thread. Safe to call from any thread."""
        self._events.put(event)
        wakeup = self._wakeup
        if wakeup is not None:
            wakeup()

    def process_events(self) -> int:
        """Apply every queued event in arrival order; return how many ran."""
        handled = 0
        while True:
            try:
                event = self._events.get_nowait()
            except queue.Empty:
                return handled
            handled += 1
            self._dispatch(event)

    def _dispatch(self, event: Event) -> None:
        if isinstance(event, PermissionResult):
            self._on_permission_result(event)
        elif isinstance(event, OpenDevice):
            self._on_open_device(event)
        elif isinstance(event, DeviceDetached):
            self._on_device_detached(event)
        elif isinstance(event, ReadFault):
            self._on_read_fault(event)
        elif isinstance(event, DisconnectRequested):
            self.disconnect()
        else:
            raise TypeError(f"Unknown connection event: {event!r}")

    # ------------------------------------------------------------------ commands
    def toggle(self) -> ConnectionState:
        """Connect when idle, otherwise disconnect."""
        if self._state is ConnectionState.DISCONNECTED:
            return self.discover()
        self.disconnect()
        return self._state

    def discover(self) -> ConnectionState:
        if self._state is not ConnectionState.DISCONNECTED:
            logger.info("Ignoring connect request while %s", self._state.value)
            return self._state

        devices = self._provider.discover()
        if not devices:
            logger.info("No serial device found")
            self._set_state(ConnectionState.DISCONNECTED, STATUS_NO_DEVICE)
            return self._state

        device = devices[0]
        self._device = device
        if self._presence is not None:
            self._presence.watch(device)

        if self._provider.has_permission(device):
            device.permission = PermissionStatus.GRANTED
            self._begin_connecting(device)
            return self._state

        logger.info("Requesting permission for %s", device)
        device.permission = PermissionStatus.REQUESTED
        self._set_state(ConnectionState.AWAITING_PERMISSION, STATUS_AWAITING_PERMISSION)
        self._provider.request_permission(device)
        return self._state

    def disconnect(self) -> None:
        """Return to DISCONNECTED. Does nothing when already there."""
        if self._state is ConnectionState.DISCONNECTED:
            return
        self._teardown(STATUS_DISCONNECTED)

    # ------------------------------------------------------------------ handlers
    def _on_permission_result(self, event: PermissionResult) -> None:
        if self._state is not ConnectionState.AWAITING_PERMISSION or event.device != self._device:
            logger.debug("Ignoring stale permission result for %s", event.device)
            return
        assert self._device is not None
        if event.granted:
            self._device.permission = PermissionStatus.GRANTED
            self._begin_connecting(self._device)
        else:
            logger.warning("Permission denied for %s", event.device)
            self._device.permission = PermissionStatus.DENIED
            self._teardown(STATUS_DISCONNECTED)

    def _begin_connecting(self, device: Device) -> None:
        self._set_state(ConnectionState.CONNECTING, STATUS_CONNECTING)
        # Queued rather than called so a detach posted before it still wins.
        self.post(OpenDevice(device))

    def _on_open_device(self, event: OpenDevice) -> None:
        if self._state is not ConnectionState.CONNECTING or event.device != self._device:
            logger.debug("Ignoring stale open request for %s", event.device)
            return

        try:
            link = self._provider.open(event.device)
        except OpenFailed as exc:
            logger.warning("%s", exc)
            self._teardown(STATUS_OPEN_FAILED)
            return

        self._session += 1
        session = self._session
        self._slot.set(link)

        def _on_fault(exc: LinkFault) -> None:
            self.post(ReadFault(session=session, error=exc))

        self._reader = self._reader_factory(self._slot, _on_fault)
        logger.info("Connected to %s (session %d)", event.device, session)
        self._set_state(ConnectionState.CONNECTED, STATUS_CONNECTED)

    def _on_device_detached(self, event: DeviceDetached) -> None:
        if self._state is ConnectionState.DISCONNECTED:
            return
        if self._device is not None and event.device != self._device:
            logger.debug("Ignoring detach of untracked device %s", event.device)
            return
        logger.info("Device detached: %s", event.device)
        self._teardown(STATUS_DISCONNECTED)

    def _on_read_fault(self, event: ReadFault) -> None:
        if self._state is not ConnectionState.CONNECTED or event.session != self._session:
            logger.debug("Ignoring read fault from session %d", event.session)
            return
        self._set_state(ConnectionState.FAULTED, STATUS_READ_FAULT)
        self._teardown(STATUS_DISCONNECTED)

    # ------------------------------------------------------------------ internals
    def _teardown(self, status: str) -> None:
        link = self._slot.take()
        reader, self._reader = self._reader, None
        if reader is not None:
            reader.stop()
        if link is not None:
            try:
                link.close()
            except LinkFault as exc:
                logger.debug("Ignoring close failure: %s", exc)
        if self._presence is not None:
            self._presence.unwatch()
        self._device = None
        self._set_state(ConnectionState.DISCONNECTED, status)

    def _set_state(self, state: ConnectionState, status: str) -> None:
        self._state = state
        self._status = status
        for listener in list(self._listeners):
            try:
                listener(state, status)
            except Exception:
                logger.exception("Connection listener failed")


__all__ = [
    "ConnectionState",
    "ConnectionManager",
    "DeviceProvider",
    "PresenceWatcher",
    "ReaderFactory",
    "ReaderHandle",
    "PermissionResult",
    "DeviceDetached",
    "ReadFault",
    "DisconnectRequested",
    "OpenDevice",
    "Event",
    "STATUS_NO_DEVICE",
    "STATUS_AWAITING_PERMISSION",
    "STATUS_CONNECTING",
    "STATUS_CONNECTED",
    "STATUS_DISCONNECTED",
    "STATUS_OPEN_FAILED",
    "STATUS_READ_FAULT",
]
