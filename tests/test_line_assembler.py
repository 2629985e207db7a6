from __future__ import annotations

from ddiscan.core.line_assembler import LineAssembler


def test_complete_lines_in_one_chunk() -> None:
    asm = LineAssembler()
    assert list(asm.feed(b"1,2\n3,4\n")) == ["1,2", "3,4"]
    assert asm.pending == 0


def test_line_split_across_chunks_is_emitted_once() -> None:
    asm = LineAssembler()
    assert list(asm.feed(b"12.5,20")) == []
    assert asm.pending == len(b"12.5,20")
    assert list(asm.feed(b"00\n")) == ["12.5,2000"]
    assert asm.pending == 0


def test_trailing_partial_line_is_kept() -> None:
    asm = LineAssembler()
    assert list(asm.feed(b"1,2\n3,")) == ["1,2"]
    assert list(asm.feed(b"4\n5")) == ["3,4"]
    assert asm.pending == 1


def test_whitespace_and_carriage_returns_are_trimmed() -> None:
    asm = LineAssembler()
    assert list(asm.feed(b"  7,8 \r\n\n")) == ["7,8", ""]


def test_byte_by_byte_delivery() -> None:
    asm = LineAssembler()
    lines: list[str] = []
    for byte in b"100,583.1\n-3,.5\n":
        lines.extend(asm.feed(bytes([byte])))
    assert lines == ["100,583.1", "-3,.5"]


def test_multibyte_character_split_across_chunks() -> None:
    asm = LineAssembler()
    payload = "µ,1\n".encode("utf-8")
    assert list(asm.feed(payload[:1])) == []
    assert list(asm.feed(payload[1:])) == ["µ,1"]


def test_invalid_utf8_does_not_break_following_lines() -> None:
    asm = LineAssembler()
    lines = list(asm.feed(b"\xff\xfe\n1,2\n"))
    assert lines[1] == "1,2"
