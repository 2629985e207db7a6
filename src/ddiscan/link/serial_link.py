"""pyserial implementation of the link and the device provider."""

from __future__ import annotations

import logging
import os
from typing import List, Optional

import serial
from serial.tools import list_ports

from ..core.connection import EventSink, PermissionResult
from ..core.errors import LinkFault, OpenFailed, OpenFailure
from ..core.models import Device

logger = logging.getLogger(__name__)

BAUD_RATE = 115200
BYTE_SIZE = serial.EIGHTBITS
STOP_BITS = serial.STOPBITS_ONE
PARITY = serial.PARITY_NONE


def _is_url(device_id: str) -> bool:
    return "://" in device_id


class SerialLink:
    """Thin wrapper around an open ``serial.Serial`` port."""

    def __init__(self, port: serial.SerialBase) -> None:
        self._serial = port

    @property
    def name(self) -> str:
        return str(self._serial.port)

    def read(self, size: int, timeout_s: float) -> bytes:
        """Return whatever arrived, up to *size* bytes, waiting at most *timeout_s*."""
        try:
            if self._serial.timeout != timeout_s:
                self._serial.timeout = timeout_s
            waiting = self._serial.in_waiting
            return bytes(self._serial.read(max(1, min(size, waiting))))
        except (serial.SerialException, OSError) as exc:
            raise LinkFault(f"{self.name}: {exc}") from exc

    def close(self) -> None:
        try:
            self._serial.close()
        except (serial.SerialException, OSError) as exc:
            raise LinkFault(f"{self.name}: {exc}") from exc


class SerialDeviceProvider:
    """
    Discover, authorise and open serial ports on a desktop host.

    Parameters
    ----------
    port:
        Explicit port name or pyserial URL (``loop://``, ``socket://host:port``).
        When omitted, the first USB serial port reported by the OS is used.
    include_non_usb:
        Also offer built-in UARTs (``/dev/ttyS*``) during discovery.
    timeout_s:
        Initial read timeout applied when the port is opened.
    """

    def __init__(
        self,
        port: Optional[str] = None,
        *,
        include_non_usb: bool = False,
        timeout_s: float = 0.2,
    ) -> None:
        self._port = port
        self._include_non_usb = bool(include_non_usb)
        self._timeout_s = float(timeout_s)
        self._post: Optional[EventSink] = None

    def set_event_sink(self, post: EventSink) -> None:
        self._post = post

    # ------------------------------------------------------------------ discovery
    def discover(self) -> List[Device]:
        if self._port:
            if _is_url(self._port) or os.path.exists(self._port) or self._port in self._listed_ports():
                return [Device(self._port, description="configured")]
            return []

        devices: List[Device] = []
        for info in sorted(list_ports.comports(), key=lambda p: p.device):
            if info.vid is None and not self._include_non_usb:
                continue
            devices.append(Device(info.device, description=info.description or ""))
        return devices

    def _listed_ports(self) -> set[str]:
        return {info.device for info in list_ports.comports()}

    # ------------------------------------------------------------------ permission
    def has_permission(self, device: Device) -> bool:
        path = device.device_id
        if _is_url(path) or not os.path.exists(path):
            # COM ports and URLs carry no file permissions.
            return True
        return os.access(path, os.R_OK | os.W_OK)

    def request_permission(self, device: Device) -> None:
        """Re-check access and report the result as a :class:`PermissionResult`.

        A desktop OS has no runtime prompt; the user fixes group membership
        (e.g. ``dialout``) and reconnects.
        """
        granted = self.has_permission(device)
        if not granted:
            logger.warning(
                "No read/write access to %s; add your user to the owning group (often 'dialout')",
                device.device_id,
            )
        if self._post is not None:
            self._post(PermissionResult(device=device, granted=granted))

    # ------------------------------------------------------------------ open
    def open(self, device: Device) -> SerialLink:
        try:
            port = serial.serial_for_url(device.device_id, do_not_open=True)
        except ValueError as exc:
            raise OpenFailed(device.device_id, OpenFailure.DRIVER_ABSENT, str(exc)) from exc

        try:
            port.baudrate = BAUD_RATE
            port.bytesize = BYTE_SIZE
            port.stopbits = STOP_BITS
            port.parity = PARITY
            port.timeout = self._timeout_s
        except ValueError as exc:
            raise OpenFailed(device.device_id, OpenFailure.PARAMETERS_REJECTED, str(exc)) from exc

        try:
            port.open()
        except (serial.SerialException, OSError) as exc:
            raise OpenFailed(device.device_id, OpenFailure.HANDLE_UNOBTAINABLE, str(exc)) from exc

        logger.info("Opened %s at %d baud 8N1", device.device_id, BAUD_RATE)
        return SerialLink(port)


__all__ = ["BAUD_RATE", "SerialLink", "SerialDeviceProvider"]
