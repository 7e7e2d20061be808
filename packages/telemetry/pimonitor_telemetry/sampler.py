"""Fixed-period sampling loop that turns kernel counters into log records."""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Protocol

from .errors import SamplerStartupError, SourceUnavailable, WriteFailure
from .models import USAGE_UNAVAILABLE, CpuCounterSnapshot, TelemetryRecord
from .sources import TelemetrySources
from .usage import cpu_usage_pct


LOGGER = logging.getLogger(__name__)


class SamplerState(str, Enum):
    INITIALIZING = "Initializing"
    SAMPLING = "Sampling"
    STOPPED = "Stopped"
    FAILED = "Failed"


class RecordSink(Protocol):
    def append(self, record: TelemetryRecord) -> None: ...


class BudgetProbe(Protocol):
    def sample(self) -> Any: ...


@dataclass(frozen=True)
class TickResult:
    record: TelemetryRecord
    snapshot: CpuCounterSnapshot


@dataclass
class SamplerStatus:
    state: SamplerState = SamplerState.INITIALIZING
    ticks: int = 0
    cpu_failures: int = 0
    last_error: str | None = None


class Sampler:
    """Single-threaded producer: one record per tick, appended synchronously.

    The previous CPU snapshot is owned by :meth:`run` as a loop variable and
    threaded through :meth:`tick`, so a failed read simply keeps the last good
    baseline for the next tick.
    """

    def __init__(
        self,
        sources: TelemetrySources,
        sink: RecordSink,
        period_s: float = 1.0,
        clock: Callable[[], int] = time.time_ns,
        sleep: Callable[[float], None] = time.sleep,
        budget: BudgetProbe | None = None,
        budget_every: int = 60,
    ) -> None:
        self.sources = sources
        self.sink = sink
        self.period_s = period_s
        self._clock = clock
        self._sleep = sleep
        self._budget = budget
        self._budget_every = max(1, budget_every)
        self._status = SamplerStatus()

    @property
    def status(self) -> SamplerStatus:
        return self._status

    def start(self) -> CpuCounterSnapshot:
        self._status.state = SamplerState.INITIALIZING
        try:
            snapshot = self.sources.cpu_counters()
        except SourceUnavailable as exc:
            self._status.state = SamplerState.FAILED
            self._status.last_error = str(exc)
            LOGGER.critical("initial cpu snapshot failed: %s", exc, extra={"event": "sampler_start_failed"})
            raise SamplerStartupError(exc.path, exc.reason) from exc

        self._status.state = SamplerState.SAMPLING
        LOGGER.info("sampler started period_s=%s", self.period_s, extra={"event": "sampler_started"})
        return snapshot

    def tick(self, previous: CpuCounterSnapshot) -> TickResult:
        try:
            current = self.sources.cpu_counters()
        except SourceUnavailable as exc:
            self._status.cpu_failures += 1
            self._status.last_error = str(exc)
            LOGGER.warning("cpu snapshot failed, keeping previous baseline: %s", exc, extra={"event": "cpu_snapshot_failed"})
            usage = USAGE_UNAVAILABLE
            current = previous
        else:
            usage = cpu_usage_pct(previous, current)

        record = TelemetryRecord.build(
            timestamp_ns=self._clock(),
            uptime_sec=self.sources.uptime_sec(),
            temp_c=self.sources.temperature_c(),
            usage_pct=usage,
            memory=self.sources.memory_info(),
        )

        self.sink.append(record)
        self._status.ticks += 1
        LOGGER.debug("record appended usage_pct=%.1f temp_c=%.2f", record.usage_pct, record.temp_c)
        return TickResult(record=record, snapshot=current)

    def _check_budget(self) -> None:
        if self._budget is None or self._status.ticks % self._budget_every:
            return
        status = self._budget.sample()
        if getattr(status, "overloaded", False):
            LOGGER.warning(
                "sampler over budget cpu_percent=%.1f rss_mb=%.1f",
                status.cpu_percent,
                status.rss_mb,
                extra={"event": "budget_overload"},
            )

    def run(self, max_ticks: int | None = None, stop_event: threading.Event | None = None) -> int:
        previous = self.start()
        performed = 0
        try:
            while max_ticks is None or performed < max_ticks:
                if stop_event is not None:
                    if stop_event.wait(self.period_s):
                        break
                else:
                    self._sleep(self.period_s)

                previous = self.tick(previous).snapshot
                performed += 1
                self._check_budget()
        except WriteFailure as exc:
            self._status.state = SamplerState.FAILED
            self._status.last_error = str(exc)
            LOGGER.critical("log append failed, stopping sampler: %s", exc, extra={"event": "write_failure"})
            raise

        self._status.state = SamplerState.STOPPED
        LOGGER.info("sampler stopped after %d ticks", performed, extra={"event": "sampler_stopped"})
        return performed
