"""CPU usage from two cumulative counter snapshots."""

from __future__ import annotations

from .models import CpuCounterSnapshot


def cpu_usage_pct(previous: CpuCounterSnapshot, current: CpuCounterSnapshot) -> float:
    """Busy share of the jiffies elapsed between two snapshots, in percent.

    Returns exactly 0.0 when no jiffies elapsed. The result is not clamped:
    a counter reset between the snapshots can push it outside [0, 100].
    """
    total_diff = current.total - previous.total
    idle_diff = current.idle_total - previous.idle_total
    if total_diff == 0:
        return 0.0
    return (total_diff - idle_diff) / total_diff * 100.0
