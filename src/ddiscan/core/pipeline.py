"""Chunk-to-batch pipeline for one serial connection."""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
import time
from typing import Callable, Optional

from ..tools.debug import debug_enabled
from .batcher import DEFAULT_BATCH_SIZE, Batcher
from .conversion import record_to_points
from .line_assembler import LineAssembler
from .models import Batch, Record
from .record_parser import parse_line

__all__ = ["PipelineStats", "ScanPipeline"]

logger = logging.getLogger(__name__)

LineParser = Callable[[str], Optional[Record]]


@dataclass(slots=True)
class PipelineStats:
    chunks: int = 0
    bytes: int = 0
    records: int = 0
    dropped_lines: int = 0
    batches: int = 0


@dataclass(slots=True)
class ScanPipeline:
    """
    Reassemble, parse, convert and batch raw serial chunks.

    Owned by the reader thread for the lifetime of one connection; nothing in
    here is shared with the consumer except the returned batches.
    """

    batch_size: int = DEFAULT_BATCH_SIZE
    parser: LineParser = parse_line
    stats: PipelineStats = field(default_factory=PipelineStats)

    _assembler: LineAssembler = field(init=False, default_factory=LineAssembler, repr=False)
    _batcher: Batcher = field(init=False, repr=False)
    _debug_last_log: float = field(init=False, default=0.0, repr=False)

    def __post_init__(self) -> None:
        self._batcher = Batcher(self.batch_size)
        self._debug_last_log = time.perf_counter()

    @property
    def assembler(self) -> LineAssembler:
        return self._assembler

    @property
    def batcher(self) -> Batcher:
        return self._batcher

    def feed(self, chunk: bytes) -> list[Batch]:
        """Consume one chunk and return the batches it completed, oldest first."""
        batches: list[Batch] = []
        self.stats.chunks += 1
        self.stats.bytes += len(chunk)

        for line in self._assembler.feed(chunk):
            record = self.parser(line)
            if record is None:
                self.stats.dropped_lines += 1
                continue
            self.stats.records += 1
            self._batcher.push(*record_to_points(record))
            batch = self._batcher.drain_if_ready()
            if batch is not None:
                self.stats.batches += 1
                batches.append(batch)

        if debug_enabled():
            self._log_throughput()
        return batches

    def _log_throughput(self) -> None:
        now = time.perf_counter()
        if now - self._debug_last_log < 5.0:
            return
        self._debug_last_log = now
        logger.info(
            "pipeline: chunks=%d bytes=%d records=%d dropped=%d batches=%d",
            self.stats.chunks,
            self.stats.bytes,
            self.stats.records,
            self.stats.dropped_lines,
            self.stats.batches,
        )
