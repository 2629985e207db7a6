from __future__ import annotations

from typing import Iterator

DELIMITER = b"\n"


class LineAssembler:
    """
    Reassemble newline-delimited text lines from arbitrarily split chunks.

    Bytes after the last delimiter stay buffered until a later chunk
    completes the line. One assembler serves exactly one stream; build a new
    one for every connection.
    """

    def __init__(self, encoding: str = "utf-8") -> None:
        self._buffer = bytearray()
        self._encoding = encoding

    @property
    def pending(self) -> int:
        """Number of buffered bytes that do not yet form a complete line."""
        return len(self._buffer)

    def feed(self, chunk: bytes) -> Iterator[str]:
        """Append *chunk* and yield every complete line, stripped of whitespace."""
        self._buffer.extend(chunk)
        while True:
            idx = self._buffer.find(DELIMITER)
            if idx < 0:
                return
            raw = bytes(self._buffer[:idx])
            del self._buffer[: idx + 1]
            yield raw.decode(self._encoding, errors="replace").strip()


__all__ = ["DELIMITER", "LineAssembler"]
