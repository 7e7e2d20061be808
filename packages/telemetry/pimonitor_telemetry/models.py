"""Typed telemetry models."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any


TEMP_UNAVAILABLE = -1.0
USAGE_UNAVAILABLE = -1.0


@dataclass(frozen=True)
class CpuCounterSnapshot:
    """Cumulative jiffy counters from the aggregate ``cpu`` line of /proc/stat."""

    user: int = 0
    nice: int = 0
    system: int = 0
    idle: int = 0
    iowait: int = 0
    irq: int = 0
    softirq: int = 0
    steal: int = 0

    def __post_init__(self) -> None:
        for f in fields(self):
            if getattr(self, f.name) < 0:
                raise ValueError(f"counter {f.name} must be >= 0")

    @property
    def idle_total(self) -> int:
        return self.idle + self.iowait

    @property
    def non_idle_total(self) -> int:
        return self.user + self.nice + self.system + self.irq + self.softirq + self.steal

    @property
    def total(self) -> int:
        return self.idle_total + self.non_idle_total


@dataclass(frozen=True)
class UsageSample:
    previous: CpuCounterSnapshot
    current: CpuCounterSnapshot

    @property
    def usage_pct(self) -> float:
        from .usage import cpu_usage_pct

        return cpu_usage_pct(self.previous, self.current)


@dataclass(frozen=True)
class MemoryInfo:
    total_kb: int = 0
    free_kb: int = 0
    available_kb: int = 0

    @property
    def used_pct(self) -> float:
        if self.total_kb <= 0:
            return 0.0
        return (1.0 - self.available_kb / self.total_kb) * 100.0


@dataclass(frozen=True)
class TelemetryRecord:
    timestamp_sec: int
    timestamp_nsec: int
    uptime_sec: float
    temp_c: float
    usage_pct: float
    memory: MemoryInfo = field(default_factory=MemoryInfo)
    used_pct: float = 0.0

    @classmethod
    def build(
        cls,
        timestamp_ns: int,
        uptime_sec: float,
        temp_c: float,
        usage_pct: float,
        memory: MemoryInfo,
    ) -> "TelemetryRecord":
        sec, nsec = divmod(int(timestamp_ns), 1_000_000_000)
        return cls(
            timestamp_sec=sec,
            timestamp_nsec=nsec,
            uptime_sec=float(uptime_sec),
            temp_c=float(temp_c),
            usage_pct=float(usage_pct),
            memory=memory,
            used_pct=memory.used_pct,
        )

    @property
    def timestamp(self) -> float:
        return self.timestamp_sec + self.timestamp_nsec / 1e9

    @property
    def total_kb(self) -> int:
        return self.memory.total_kb

    @property
    def free_kb(self) -> int:
        return self.memory.free_kb

    @property
    def available_kb(self) -> int:
        return self.memory.available_kb

    def as_dict(self) -> dict[str, Any]:
        """Nested record shape with ``timestamp`` as a float (sub-microsecond digits are rounded)."""
        return {
            "timestamp": self.timestamp,
            "uptime_sec": self.uptime_sec,
            "cpu": {"temp_c": self.temp_c, "usage_pct": self.usage_pct},
            "memory": {
                "total_kb": self.total_kb,
                "free_kb": self.free_kb,
                "available_kb": self.available_kb,
                "used_pct": self.used_pct,
            },
        }
