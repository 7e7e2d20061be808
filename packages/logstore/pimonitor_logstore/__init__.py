"""Append-only telemetry log: writer and latest-record extractor."""

from .extractor import DEFAULT_WINDOW_BYTES, LatestRecordExtractor, read_tail, select_latest_line
from .writer import LogWriter

__all__ = [
    "DEFAULT_WINDOW_BYTES",
    "LatestRecordExtractor",
    "LogWriter",
    "read_tail",
    "select_latest_line",
]
