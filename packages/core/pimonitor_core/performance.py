"""Resource budget for the long-running sampler process."""

from __future__ import annotations

from dataclasses import dataclass

import psutil


@dataclass(frozen=True)
class PerformanceTargets:
    cpu_percent_max: float = 5.0
    rss_mb_max: float = 64.0


@dataclass(frozen=True)
class BudgetStatus:
    cpu_percent: float
    rss_mb: float
    overloaded: bool
    warning: str | None


class PerformanceController:
    def __init__(self, targets: PerformanceTargets | None = None, pid: int | None = None) -> None:
        self.targets = targets or PerformanceTargets()
        self._process = psutil.Process(pid)
        # Prime non-blocking CPU measurement.
        self._process.cpu_percent(interval=None)

    def sample(self) -> BudgetStatus:
        cpu = float(self._process.cpu_percent(interval=None))
        rss_mb = float(self._process.memory_info().rss) / (1024 * 1024)
        overloaded = cpu > self.targets.cpu_percent_max or rss_mb > self.targets.rss_mb_max
        return BudgetStatus(
            cpu_percent=cpu,
            rss_mb=rss_mb,
            overloaded=overloaded,
            warning="resource_overload" if overloaded else None,
        )
