from __future__ import annotations

import pytest

from ddiscan.core.errors import MalformedRecord
from ddiscan.core.models import Record
from ddiscan.core.record_parser import parse_line, parse_record


def test_parse_valid_record() -> None:
    assert parse_record("12.5,2000") == Record(amplitude=12.5, tof_us=2000.0)


@pytest.mark.parametrize(
    "line, expected",
    [
        ("-3,+40", Record(-3.0, 40.0)),
        (".5,1.", Record(0.5, 1.0)),
        ("1e2,2E-1", Record(100.0, 0.2)),
        (" 4 , 5 ", Record(4.0, 5.0)),
    ],
)
def test_signs_fractions_and_exponents(line: str, expected: Record) -> None:
    assert parse_record(line) == expected


@pytest.mark.parametrize(
    "line",
    [
        "",
        "12.5",
        "1,2,3",
        "abc,123",
        "12.5,",
        ",12.5",
        "nan,1",
        "1,inf",
        "1_000,2",
        "0x10,2",
        "1.2.3,4",
    ],
)
def test_malformed_lines_raise(line: str) -> None:
    with pytest.raises(MalformedRecord):
        parse_record(line)


def test_malformed_record_is_a_value_error() -> None:
    with pytest.raises(ValueError):
        parse_record("12.5")


def test_parse_line_returns_none_for_malformed_input() -> None:
    assert parse_line("abc,123") is None
    assert parse_line("12.5") is None
    assert parse_line("700,1000") == Record(700.0, 1000.0)
