"""Readers for the kernel virtual files under /proc and /sys."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

from .errors import SourceUnavailable
from .models import TEMP_UNAVAILABLE, CpuCounterSnapshot, MemoryInfo


LOGGER = logging.getLogger(__name__)

PROC_STAT_PATH = "/proc/stat"
THERMAL_ZONE_PATH = "/sys/class/thermal/thermal_zone0/temp"
PROC_UPTIME_PATH = "/proc/uptime"
PROC_MEMINFO_PATH = "/proc/meminfo"

_CPU_FIELDS = ("user", "nice", "system", "idle", "iowait", "irq", "softirq", "steal")
_CPU_MANDATORY = 4

_MEMINFO_KEYS = {
    "MemTotal": "total_kb",
    "MemFree": "free_kb",
    "MemAvailable": "available_kb",
}


def parse_cpu_line(line: str, path: str = PROC_STAT_PATH) -> CpuCounterSnapshot:
    tokens = line.split()
    if not tokens or tokens[0] != "cpu":
        raise SourceUnavailable(path, "missing aggregate cpu line")

    values: list[int] = []
    for token in tokens[1 : 1 + len(_CPU_FIELDS)]:
        if not token.isdigit():
            break
        values.append(int(token))

    if len(values) < _CPU_MANDATORY:
        raise SourceUnavailable(path, f"expected at least {_CPU_MANDATORY} counters, got {len(values)}")

    # Kernels before 2.6.11 have no steal column; missing tail counters read as 0.
    values.extend([0] * (len(_CPU_FIELDS) - len(values)))
    return CpuCounterSnapshot(**dict(zip(_CPU_FIELDS, values)))


def read_cpu_counters(path: str | Path = PROC_STAT_PATH) -> CpuCounterSnapshot:
    try:
        with open(path, "r", encoding="ascii", errors="replace") as fh:
            line = fh.readline()
    except OSError as exc:
        raise SourceUnavailable(str(path), exc.strerror or str(exc)) from exc
    return parse_cpu_line(line, str(path))


def read_temperature_c(path: str | Path = THERMAL_ZONE_PATH) -> float:
    try:
        raw = Path(path).read_text(encoding="ascii", errors="replace")
        millidegrees = int(raw.split()[0])
    except (OSError, ValueError, IndexError) as exc:
        LOGGER.debug("temperature unavailable from %s: %s", path, exc)
        return TEMP_UNAVAILABLE
    return millidegrees / 1000.0


def read_uptime_sec(path: str | Path = PROC_UPTIME_PATH) -> float:
    try:
        raw = Path(path).read_text(encoding="ascii", errors="replace")
        return float(raw.split()[0])
    except (OSError, ValueError, IndexError) as exc:
        LOGGER.debug("uptime unavailable from %s: %s", path, exc)
        return 0.0


def parse_meminfo(lines: Iterable[str]) -> MemoryInfo:
    found: dict[str, int] = {}
    for line in lines:
        key, sep, rest = line.partition(":")
        if not sep:
            continue
        attr = _MEMINFO_KEYS.get(key.strip())
        if attr is None:
            continue
        parts = rest.split()
        if parts and parts[0].isdigit():
            found[attr] = int(parts[0])
    return MemoryInfo(**found)


def read_memory_info(path: str | Path = PROC_MEMINFO_PATH) -> MemoryInfo:
    try:
        with open(path, "r", encoding="ascii", errors="replace") as fh:
            return parse_meminfo(fh)
    except OSError as exc:
        LOGGER.debug("meminfo unavailable from %s: %s", path, exc)
        return MemoryInfo()


@dataclass(frozen=True)
class TelemetrySources:
    """The four source paths one sampler reads on every tick."""

    proc_stat: str = PROC_STAT_PATH
    thermal_zone: str = THERMAL_ZONE_PATH
    proc_uptime: str = PROC_UPTIME_PATH
    proc_meminfo: str = PROC_MEMINFO_PATH

    def cpu_counters(self) -> CpuCounterSnapshot:
        return read_cpu_counters(self.proc_stat)

    def temperature_c(self) -> float:
        return read_temperature_c(self.thermal_zone)

    def uptime_sec(self) -> float:
        return read_uptime_sec(self.proc_uptime)

    def memory_info(self) -> MemoryInfo:
        return read_memory_info(self.proc_meminfo)

    def probe(self) -> dict[str, dict[str, object]]:
        out: dict[str, dict[str, object]] = {}
        for name in ("proc_stat", "thermal_zone", "proc_uptime", "proc_meminfo"):
            path = Path(getattr(self, name))
            entry: dict[str, object] = {"path": str(path), "readable": False, "error": None}
            try:
                with path.open("rb") as fh:
                    fh.read(64)
                entry["readable"] = True
            except OSError as exc:
                entry["error"] = exc.strerror or str(exc)
            out[name] = entry

        try:
            self.cpu_counters()
        except SourceUnavailable as exc:
            out["proc_stat"]["readable"] = False
            out["proc_stat"]["error"] = exc.reason
        return out
