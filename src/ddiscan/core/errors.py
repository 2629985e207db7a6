"""Exception types shared by the ingestion pipeline and the link layer."""

from __future__ import annotations

from enum import Enum
from typing import Optional

__all__ = [
    "DDiScanError",
    "MalformedRecord",
    "LinkFault",
    "OpenFailure",
    "OpenFailed",
]


class DDiScanError(Exception):
    """Base class for errors raised by ddiscan."""


class MalformedRecord(DDiScanError, ValueError):
    """A text line that is not a valid ``amplitude,tof_us`` record."""

    def __init__(self, line: str, reason: str) -> None:
        super().__init__(f"{reason}: {line!r}")
        self.line = line
        self.reason = reason


class LinkFault(DDiScanError):
    """I/O failure on an open serial link.

    Only this error moves the connection state machine; anything else escaping
    a link call is treated as a programming error.
    """


class OpenFailure(Enum):
    DRIVER_ABSENT = "driver absent"
    HANDLE_UNOBTAINABLE = "device handle unobtainable"
    PARAMETERS_REJECTED = "port parameters rejected"


class OpenFailed(DDiScanError):
    """Opening a device did not produce a usable link."""

    def __init__(self, device_id: str, reason: OpenFailure, detail: Optional[str] = None) -> None:
        message = f"Cannot open {device_id}: {reason.value}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)
        self.device_id = device_id
        self.reason = reason
