"""Link protocol and the slot that hands the open link to the reader."""

from __future__ import annotations

import threading
from typing import Optional, Protocol

__all__ = ["Link", "LinkSlot"]


class Link(Protocol):
    """An open serial connection.

    ``read`` returns up to *size* bytes, or ``b""`` when nothing arrived
    within *timeout_s*. Both methods raise :class:`~ddiscan.core.errors.LinkFault`
    on I/O failure.
    """

    def read(self, size: int, timeout_s: float) -> bytes:  # pragma: no cover - protocol
        ...

    def close(self) -> None:  # pragma: no cover - protocol
        ...


class LinkSlot:
    """Lock-guarded holder for the current link.

    The connection manager is the only writer. The reader takes a snapshot
    with :meth:`get` on every iteration and stops once the slot is empty.
    """

    def __init__(self) -> None:
        self._link: Optional[Link] = None
        self._lock = threading.Lock()

    def get(self) -> Optional[Link]:
        with self._lock:
            return self._link

    def set(self, link: Link) -> None:
        with self._lock:
            self._link = link

    def take(self) -> Optional[Link]:
        """Empty the slot and return whatever link it held."""
        with self._lock:
            link, self._link = self._link, None
            return link

    def __bool__(self) -> bool:
        return self.get() is not None
