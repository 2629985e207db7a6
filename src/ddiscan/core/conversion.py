"""Time-of-flight to distance conversion for the ultrasonic ranger."""

from __future__ import annotations

from .models import Point, Record

SPEED_OF_SOUND_MM_PER_S = 343000.0

# Round trip (/2) and microseconds to seconds (/1e6).
_TOF_DIVISOR = 2_000_000.0


def tof_to_distance_mm(tof_us: float) -> float:
    """Convert an echo's round-trip time in microseconds to a distance in mm.

    No clamping is applied; bounding is left to the plot.
    """
    return SPEED_OF_SOUND_MM_PER_S * float(tof_us) / _TOF_DIVISOR


def record_to_points(record: Record) -> tuple[Point, Point]:
    """Return the baseline and signal points drawn for one record."""
    distance = tof_to_distance_mm(record.tof_us)
    return Point(distance, 0.0), Point(distance, record.amplitude)


__all__ = ["SPEED_OF_SOUND_MM_PER_S", "tof_to_distance_mm", "record_to_points"]
