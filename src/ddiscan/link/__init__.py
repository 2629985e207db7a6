"""Serial port access: pyserial link, device provider, and presence monitor."""

from .presence import DevicePresenceMonitor
from .serial_link import BAUD_RATE, SerialDeviceProvider, SerialLink

__all__ = ["BAUD_RATE", "DevicePresenceMonitor", "SerialDeviceProvider", "SerialLink"]
