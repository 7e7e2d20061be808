"""Kernel telemetry sources, CPU usage math, record codec, and the sampler loop."""

from .codec import RECORD_PREFIX, decode_record, encode_record, extract_field
from .errors import PiMonitorError, SamplerStartupError, SourceUnavailable, WriteFailure
from .models import (
    TEMP_UNAVAILABLE,
    USAGE_UNAVAILABLE,
    CpuCounterSnapshot,
    MemoryInfo,
    TelemetryRecord,
    UsageSample,
)
from .sampler import Sampler, SamplerState, SamplerStatus, TickResult
from .sources import TelemetrySources
from .usage import cpu_usage_pct

__all__ = [
    "CpuCounterSnapshot",
    "MemoryInfo",
    "PiMonitorError",
    "RECORD_PREFIX",
    "Sampler",
    "SamplerStartupError",
    "SamplerState",
    "SamplerStatus",
    "SourceUnavailable",
    "TEMP_UNAVAILABLE",
    "TelemetryRecord",
    "TelemetrySources",
    "TickResult",
    "USAGE_UNAVAILABLE",
    "UsageSample",
    "WriteFailure",
    "cpu_usage_pct",
    "decode_record",
    "encode_record",
    "extract_field",
]
