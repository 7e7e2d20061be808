"""Append-only writer for the telemetry log."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import IO

from pimonitor_telemetry.codec import encode_record
from pimonitor_telemetry.errors import WriteFailure
from pimonitor_telemetry.models import TelemetryRecord


LOGGER = logging.getLogger(__name__)


class LogWriter:
    """Exclusive appender: one encoded record per line, flushed per write."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self._fh: IO[str] | None = None

    def open(self) -> None:
        if self._fh is not None:
            return
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self._fh = self.path.open("a", encoding="utf-8", newline="\n")
        except OSError as exc:
            raise WriteFailure(str(self.path), exc.strerror or str(exc)) from exc
        LOGGER.info("appending records to %s", self.path, extra={"event": "log_opened"})

    def append(self, record: TelemetryRecord) -> None:
        self.open()
        assert self._fh is not None
        try:
            self._fh.write(encode_record(record))
            self._fh.flush()
        except OSError as exc:
            raise WriteFailure(str(self.path), exc.strerror or str(exc)) from exc

    def close(self) -> None:
        if self._fh is None:
            return
        try:
            self._fh.close()
        finally:
            self._fh = None

    def __enter__(self) -> "LogWriter":
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
