"""Line codec for the newline-delimited telemetry log.

Records are written as one compact JSON object per line. Reading is
forgiving: a line that fails to parse as JSON (usually the tail of a record
still being appended) is scanned field by field. A field that is missing or
out of numeric range reads as zero.
"""

from __future__ import annotations

import json
import re
from decimal import Decimal, InvalidOperation
from typing import Any

from .models import MemoryInfo, TelemetryRecord


RECORD_PREFIX = '{"timestamp"'

_NUMBER_RE = re.compile(r"\s*(-?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][-+]?\d+)?)")
_NSEC_PER_SEC = 1_000_000_000
# Largest decimal exponent a stored field may carry; anything beyond reads as 0.
_MAX_EXPONENT = 18
_FIELDS = ("timestamp", "uptime_sec", "temp_c", "usage_pct", "total_kb", "free_kb", "available_kb", "used_pct")


def encode_record(record: TelemetryRecord) -> str:
    return (
        "{"
        f'"timestamp":{record.timestamp_sec}.{record.timestamp_nsec:09d},'
        f'"uptime_sec":{record.uptime_sec:.2f},'
        '"cpu":{'
        f'"temp_c":{record.temp_c:.2f},'
        f'"usage_pct":{record.usage_pct:.1f}'
        "},"
        '"memory":{'
        f'"total_kb":{record.total_kb:d},'
        f'"free_kb":{record.free_kb:d},'
        f'"available_kb":{record.available_kb:d},'
        f'"used_pct":{record.used_pct:.1f}'
        "}"
        "}\n"
    )


def _extract_token(line: str, key: str) -> str | None:
    needle = f'"{key}":'
    pos = line.find(needle)
    if pos < 0:
        return None
    match = _NUMBER_RE.match(line, pos + len(needle))
    if not match:
        return None
    return match.group(1)


def extract_field(line: str, key: str) -> float:
    """Value following the first ``"key":`` in ``line``, or 0.0."""
    token = _extract_token(line, key)
    if token is None:
        return 0.0
    return float(token)


def _split_timestamp(value: Decimal) -> tuple[int, int]:
    if value < 0:
        return 0, 0
    sec = int(value)
    nsec = int((value - sec) * _NSEC_PER_SEC)
    return sec, nsec


def _lookup(data: Any, key: str) -> Any:
    if isinstance(data, dict):
        if key in data:
            return data[key]
        for value in data.values():
            found = _lookup(value, key)
            if found is not None:
                return found
    return None


def _decimal(value: Any) -> Decimal:
    if isinstance(value, bool) or value is None:
        return Decimal(0)
    try:
        number = Decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        return Decimal(0)
    if not number.is_finite() or number.adjusted() > _MAX_EXPONENT:
        return Decimal(0)
    return number


def _record_from_values(values: dict[str, Decimal]) -> TelemetryRecord:
    sec, nsec = _split_timestamp(values["timestamp"])
    memory = MemoryInfo(
        total_kb=max(int(values["total_kb"]), 0),
        free_kb=max(int(values["free_kb"]), 0),
        available_kb=max(int(values["available_kb"]), 0),
    )
    return TelemetryRecord(
        timestamp_sec=sec,
        timestamp_nsec=nsec,
        uptime_sec=float(values["uptime_sec"]),
        temp_c=float(values["temp_c"]),
        usage_pct=float(values["usage_pct"]),
        memory=memory,
        used_pct=float(values["used_pct"]),
    )


def decode_record(line: str) -> TelemetryRecord:
    stripped = line.strip()
    try:
        data = json.loads(stripped, parse_float=Decimal, parse_int=Decimal, parse_constant=lambda _name: Decimal(0))
    except ValueError:
        data = None

    values: dict[str, Decimal] = {}
    if isinstance(data, dict):
        for key in _FIELDS:
            values[key] = _decimal(_lookup(data, key))
    else:
        for key in _FIELDS:
            token = _extract_token(stripped, key)
            values[key] = _decimal(token) if token is not None else Decimal(0)
    return _record_from_values(values)
