"""Factory helpers that wire a :class:`ConnectionManager` from configuration."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from ..config import ScanConfig
from .connection import ConnectionManager, DeviceProvider, PresenceWatcher
from .errors import LinkFault
from .handoff import BatchChannel
from .link import LinkSlot
from .pipeline import ScanPipeline
from .stream_reader import StreamReaderHandle, start_reader


@dataclass(slots=True)
class SessionHandles:
    """Return value from :func:`build_session` containing ready-to-use pieces."""

    manager: ConnectionManager
    channel: BatchChannel


def make_reader_factory(
    cfg: ScanConfig,
    channel: BatchChannel,
) -> Callable[[LinkSlot, Callable[[LinkFault], None]], StreamReaderHandle]:
    """Return a factory that starts one reader thread per connection.

    Every connection gets a fresh :class:`ScanPipeline` so no partial line
    or half-filled batch leaks from one stream into the next.
    """

    def _factory(slot: LinkSlot, on_fault: Callable[[LinkFault], None]) -> StreamReaderHandle:
        return start_reader(
            slot,
            channel.offer,
            pipeline=ScanPipeline(batch_size=cfg.batch_size),
            on_fault=on_fault,
            read_size=cfg.read_size,
            read_timeout_s=cfg.read_timeout_s,
        )

    return _factory


def build_session(
    cfg: ScanConfig,
    provider: DeviceProvider,
    *,
    presence: Optional[PresenceWatcher] = None,
    channel: Optional[BatchChannel] = None,
    wakeup: Optional[Callable[[], None]] = None,
) -> SessionHandles:
    """
    Build the connection manager and the batch channel it feeds.

    Parameters
    ----------
    cfg:
        Runtime configuration (usually loaded from YAML).
    provider:
        Device discovery/permission/open collaborator.
    presence:
        Optional watcher that posts detach events for the tracked device.
    channel:
        Optional :class:`BatchChannel`; created from ``cfg.handoff_queue_size``
        when omitted.
    wakeup:
        Called (from any thread) whenever an event is posted to the manager.
    """
    normalized = cfg.sanitized()
    channel = channel or BatchChannel(maxsize=normalized.handoff_queue_size)
    manager = ConnectionManager(
        provider,
        make_reader_factory(normalized, channel),
        presence=presence,
        wakeup=wakeup,
    )
    return SessionHandles(manager=manager, channel=channel)


__all__ = ["SessionHandles", "make_reader_factory", "build_session"]
