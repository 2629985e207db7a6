"""Core ingestion pipeline: reassembly, parsing, batching, and connection lifecycle.

This package sits between the serial link and the GUI: the reader thread
turns raw chunks into immutable batches, and the connection manager decides
when that thread runs.
"""

# Data structures shared by the pipeline
from .models import Batch, Device, PermissionStatus, Point, RangeConfig, Record

# Pipeline stages
from .batcher import Batcher
from .conversion import SPEED_OF_SOUND_MM_PER_S, record_to_points, tof_to_distance_mm
from .line_assembler import LineAssembler
from .pipeline import PipelineStats, ScanPipeline
from .record_parser import parse_line, parse_record

# Threading and lifecycle
from .connection import ConnectionManager, ConnectionState
from .handoff import BatchChannel
from .link import Link, LinkSlot
from .stream_reader import StreamReaderHandle, reader_loop, start_reader
from .wiring import SessionHandles, build_session

__all__ = [
    "Batch",
    "Device",
    "PermissionStatus",
    "Point",
    "RangeConfig",
    "Record",
    "Batcher",
    "SPEED_OF_SOUND_MM_PER_S",
    "record_to_points",
    "tof_to_distance_mm",
    "LineAssembler",
    "PipelineStats",
    "ScanPipeline",
    "parse_line",
    "parse_record",
    "ConnectionManager",
    "ConnectionState",
    "BatchChannel",
    "Link",
    "LinkSlot",
    "StreamReaderHandle",
    "reader_loop",
    "start_reader",
    "SessionHandles",
    "build_session",
]
