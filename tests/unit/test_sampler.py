import sys
import threading
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT / "packages" / "telemetry"))

from pimonitor_telemetry.errors import SamplerStartupError, SourceUnavailable, WriteFailure
from pimonitor_telemetry.models import CpuCounterSnapshot, MemoryInfo
from pimonitor_telemetry.sampler import Sampler, SamplerState


S0 = CpuCounterSnapshot(user=100, nice=0, system=50, idle=800, iowait=50)
S1 = CpuCounterSnapshot(user=110, nice=0, system=60, idle=810, iowait=50)
S2 = CpuCounterSnapshot(user=110, nice=0, system=60, idle=830, iowait=50)


class _FakeSources:
    def __init__(self, snapshots):
        self._snapshots = list(snapshots)
        self.memory_reads = 0

    def cpu_counters(self):
        item = self._snapshots.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    def temperature_c(self):
        return 47.5

    def uptime_sec(self):
        return 3600.0

    def memory_info(self):
        self.memory_reads += 1
        return MemoryInfo(total_kb=1_000_000, free_kb=100_000, available_kb=400_000)


class _ListSink:
    def __init__(self):
        self.records = []

    def append(self, record):
        self.records.append(record)


class _BrokenSink:
    def append(self, record):
        raise WriteFailure("monitor.log", "disk full")


class _Overloaded:
    overloaded = True
    cpu_percent = 50.0
    rss_mb = 512.0


class _Budget:
    def __init__(self):
        self.calls = 0

    def sample(self):
        self.calls += 1
        return _Overloaded()


def _unavailable():
    return SourceUnavailable("/proc/stat", "busy")


class SamplerTests(unittest.TestCase):
    def _sampler(self, snapshots, sink=None, **kwargs):
        return Sampler(
            _FakeSources(snapshots),
            sink or _ListSink(),
            period_s=1.0,
            clock=lambda: 1_700_000_000_500_000_000,
            sleep=lambda _s: None,
            **kwargs,
        )

    def test_start_failure_is_fatal(self):
        sampler = self._sampler([_unavailable()])
        with self.assertRaises(SamplerStartupError):
            sampler.start()
        self.assertEqual(sampler.status.state, SamplerState.FAILED)

    def test_run_start_failure_appends_nothing(self):
        sink = _ListSink()
        sampler = self._sampler([_unavailable()], sink=sink)
        with self.assertRaises(SamplerStartupError):
            sampler.run(max_ticks=3)
        self.assertEqual(sink.records, [])

    def test_tick_computes_usage_and_advances_snapshot(self):
        sink = _ListSink()
        sampler = self._sampler([S0, S1], sink=sink)
        previous = sampler.start()
        result = sampler.tick(previous)

        self.assertEqual(result.snapshot, S1)
        self.assertAlmostEqual(result.record.usage_pct, 20 / 30 * 100)
        self.assertEqual(result.record.temp_c, 47.5)
        self.assertEqual(result.record.uptime_sec, 3600.0)
        self.assertAlmostEqual(result.record.used_pct, 60.0)
        self.assertEqual(result.record.timestamp_sec, 1_700_000_000)
        self.assertEqual(result.record.timestamp_nsec, 500_000_000)
        self.assertEqual(sink.records, [result.record])

    def test_failed_snapshot_keeps_previous_baseline(self):
        sources_list = [S0, _unavailable()]
        sampler = self._sampler(sources_list)
        previous = sampler.start()
        with self.assertLogs("pimonitor_telemetry.sampler", level="WARNING"):
            result = sampler.tick(previous)
        self.assertIs(result.snapshot, previous)
        self.assertEqual(result.record.usage_pct, -1.0)
        self.assertEqual(result.record.temp_c, 47.5)
        self.assertEqual(sampler.status.cpu_failures, 1)

    def test_run_retries_against_last_good_snapshot(self):
        sink = _ListSink()
        sampler = self._sampler([S0, S1, _unavailable(), S2], sink=sink)
        performed = sampler.run(max_ticks=3)

        self.assertEqual(performed, 3)
        self.assertEqual(sampler.status.state, SamplerState.STOPPED)
        usages = [r.usage_pct for r in sink.records]
        self.assertAlmostEqual(usages[0], 20 / 30 * 100)
        self.assertEqual(usages[1], -1.0)
        # S1 -> S2: total +20, idle +20.
        self.assertEqual(usages[2], 0.0)

    def test_other_sources_read_every_tick(self):
        sources = _FakeSources([S0, _unavailable(), _unavailable()])
        sampler = Sampler(sources, _ListSink(), sleep=lambda _s: None)
        sampler.run(max_ticks=2)
        self.assertEqual(sources.memory_reads, 2)

    def test_write_failure_is_fatal(self):
        sampler = self._sampler([S0, S1], sink=_BrokenSink())
        with self.assertRaises(WriteFailure):
            sampler.run(max_ticks=5)
        self.assertEqual(sampler.status.state, SamplerState.FAILED)

    def test_stop_event(self):
        stop = threading.Event()
        stop.set()
        sink = _ListSink()
        sampler = self._sampler([S0], sink=sink)
        self.assertEqual(sampler.run(stop_event=stop), 0)
        self.assertEqual(sampler.status.state, SamplerState.STOPPED)
        self.assertEqual(sink.records, [])

    def test_sleeps_one_period_per_tick(self):
        sleeps = []
        sampler = Sampler(_FakeSources([S0, S1, S2]), _ListSink(), period_s=2.5, sleep=sleeps.append)
        sampler.run(max_ticks=2)
        self.assertEqual(sleeps, [2.5, 2.5])

    def test_budget_overload_is_logged_not_fatal(self):
        budget = _Budget()
        sampler = self._sampler([S0, S1, S2], budget=budget, budget_every=1)
        with self.assertLogs("pimonitor_telemetry.sampler", level="WARNING") as logs:
            self.assertEqual(sampler.run(max_ticks=2), 2)
        self.assertEqual(budget.calls, 2)
        self.assertTrue(any("over budget" in line for line in logs.output))


if __name__ == "__main__":
    unittest.main()
