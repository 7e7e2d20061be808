"""Latest-record lookup over a bounded tail of the append-only log.

Only the last ``window_bytes`` of the file are read, so the cost of a lookup
does not grow with the log. A record longer than the window cannot be
recovered; raising ``max_window_bytes`` lets the window double until a
record opener is found, still bounded by that cap.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from pimonitor_telemetry.codec import RECORD_PREFIX, decode_record
from pimonitor_telemetry.models import TelemetryRecord


LOGGER = logging.getLogger(__name__)

DEFAULT_WINDOW_BYTES = 1024


def read_tail(path: str | Path, size: int) -> tuple[bytes, bool]:
    """Return the last ``size`` bytes and whether they start at offset 0."""
    try:
        with open(path, "rb") as fh:
            length = fh.seek(0, os.SEEK_END)
            if length == 0:
                return b"", True
            start = max(0, length - size)
            fh.seek(start)
            return fh.read(length - start), start == 0
    except FileNotFoundError:
        return b"", True
    except OSError as exc:
        LOGGER.warning("log tail unreadable at %s: %s", path, exc, extra={"event": "log_tail_unreadable"})
        return b"", True


def select_latest_line(window: str) -> str | None:
    """Pick the most recent line in ``window`` that opens a record.

    A non-empty trailing fragment after the last newline wins over every
    complete line when it qualifies, even though it may still be mid-append.
    """
    *complete, tail = window.split("\n")

    if tail and tail.startswith(RECORD_PREFIX):
        return tail

    latest = None
    for line in complete:
        if line.startswith(RECORD_PREFIX):
            latest = line
    return latest


class LatestRecordExtractor:
    def __init__(
        self,
        path: str | Path,
        window_bytes: int = DEFAULT_WINDOW_BYTES,
        max_window_bytes: int | None = None,
    ) -> None:
        if window_bytes <= 0:
            raise ValueError("window_bytes must be positive")
        self.path = Path(path)
        self.window_bytes = window_bytes
        self.max_window_bytes = max(window_bytes, max_window_bytes or window_bytes)

    def latest_line(self) -> str | None:
        size = self.window_bytes
        while True:
            raw, at_start = read_tail(self.path, size)
            if not raw:
                return None
            line = select_latest_line(raw.decode("utf-8", errors="replace"))
            if line is not None:
                return line
            if at_start or size >= self.max_window_bytes:
                LOGGER.debug("no record opener in last %d bytes of %s", len(raw), self.path)
                return None
            size = min(size * 2, self.max_window_bytes)

    def latest(self) -> TelemetryRecord | None:
        """Most recent record, or ``None`` when the log holds no data yet."""
        line = self.latest_line()
        if line is None:
            return None
        return decode_record(line)
