"""Shared dataclasses for ranging samples, batches, and devices."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import NamedTuple

import numpy as np


@dataclass(frozen=True, slots=True)
class Record:
    amplitude: float
    tof_us: float


class Point(NamedTuple):
    distance_mm: float
    value: float


@dataclass(frozen=True, slots=True)
class Batch:
    """Immutable snapshot of points handed to the rendering side."""

    points: tuple[Point, ...]
    sequence: int = 0

    def __len__(self) -> int:
        return len(self.points)

    def to_arrays(self) -> tuple[np.ndarray, np.ndarray]:
        """Return ``(distance_mm, value)`` as float64 arrays for plotting."""
        if not self.points:
            empty = np.empty(0, dtype=np.float64)
            return empty, empty.copy()
        data = np.asarray(self.points, dtype=np.float64)
        return data[:, 0], data[:, 1]


@dataclass
class RangeConfig:
    """Axis bounds used by the scan plot.

    Values are taken as given: non-positive or inverted bounds are accepted.
    """

    x_max: float = 3000.0  # distance in mm
    y_max: float = 700.0  # amplitude (ADC counts)

    def set_range(self, x_max: float, y_max: float) -> None:
        self.x_max = float(x_max)
        self.y_max = float(y_max)


class PermissionStatus(Enum):
    UNKNOWN = "unknown"
    REQUESTED = "requested"
    GRANTED = "granted"
    DENIED = "denied"


@dataclass
class Device:
    """A discovered serial device; equality is by ``device_id`` only."""

    device_id: str
    description: str = field(default="", compare=False)
    permission: PermissionStatus = field(default=PermissionStatus.UNKNOWN, compare=False)

    def __str__(self) -> str:
        if self.description:
            return f"{self.device_id} ({self.description})"
        return self.device_id
