from __future__ import annotations

import pytest

from ddiscan.core.conversion import SPEED_OF_SOUND_MM_PER_S, record_to_points, tof_to_distance_mm
from ddiscan.core.models import Point, Record


def test_one_millisecond_echo_is_171_5_mm() -> None:
    assert tof_to_distance_mm(1000) == 171.5


def test_conversion_uses_round_trip_speed_of_sound() -> None:
    assert SPEED_OF_SOUND_MM_PER_S == 343000
    assert tof_to_distance_mm(2000.0) == 343.0
    assert tof_to_distance_mm(0.0) == 0.0


def test_conversion_does_not_clamp() -> None:
    assert tof_to_distance_mm(-1000) == -171.5
    assert tof_to_distance_mm(1e6) == pytest.approx(171500.0)


def test_record_yields_baseline_then_signal_point() -> None:
    baseline, signal = record_to_points(Record(amplitude=12.5, tof_us=2000.0))
    assert baseline == Point(343.0, 0.0)
    assert signal == Point(343.0, 12.5)
