"""DDiScan: live A-scan viewer for a serial ultrasonic ranging sensor."""

__version__ = "0.1.0"
