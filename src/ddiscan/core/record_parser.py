"""
The ranging sensor prints one record per line:

  amplitude,tof_us

``amplitude`` is the raw echo amplitude (ADC counts) and ``tof_us`` the echo's
round-trip time in microseconds. Both are decimal numbers; signs, fractions
and exponents are allowed, nothing else is.
"""

from __future__ import annotations

import logging
import re
import time

from ..tools.debug import debug_enabled
from .errors import MalformedRecord
from .models import Record

logger = logging.getLogger(__name__)

FIELD_SEPARATOR = ","

_DECIMAL_RE = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")


def _parse_decimal(text: str, line: str, name: str) -> float:
    field = text.strip()
    if not _DECIMAL_RE.fullmatch(field):
        raise MalformedRecord(line, f"{name} is not a decimal number")
    return float(field)


def parse_record(line: str) -> Record:
    """Parse *line* into a :class:`Record` or raise :class:`MalformedRecord`."""
    parts = line.split(FIELD_SEPARATOR)
    if len(parts) != 2:
        raise MalformedRecord(line, f"expected 2 fields, got {len(parts)}")
    amplitude = _parse_decimal(parts[0], line, "amplitude")
    tof_us = _parse_decimal(parts[1], line, "tof_us")
    return Record(amplitude=amplitude, tof_us=tof_us)


_parse_time_acc = 0.0
_parse_count = 0


def parse_line(line: str) -> Record | None:
    """
    Parse a single line from the sensor into a :class:`Record`.

    Invalid lines return ``None`` so the stream loop can skip them without
    raising; nothing of a rejected line is kept.
    """
    global _parse_time_acc, _parse_count

    debug_on = debug_enabled()
    start = time.perf_counter() if debug_on else 0.0

    try:
        record: Record | None = parse_record(line)
    except MalformedRecord as exc:
        logger.debug("Dropping sensor line: %s", exc)
        record = None

    if debug_on:
        _parse_time_acc += time.perf_counter() - start
        _parse_count += 1
        if _parse_count % 1000 == 0:
            avg_us = (_parse_time_acc / max(1, _parse_count)) * 1e6
            logger.info("record_parser.parse_line avg %.1f µs over %d lines", avg_us, _parse_count)

    return record


__all__ = ["FIELD_SEPARATOR", "parse_record", "parse_line"]
