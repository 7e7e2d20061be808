"""Value formatting shared by the HTML page and the PNG card."""

from __future__ import annotations

from pimonitor_telemetry.models import TEMP_UNAVAILABLE, TelemetryRecord

from .models import DashboardView, ThemeConfig


HIGH_USAGE_PCT = 80.0
NO_DATA_TEXT = "No data available yet."


def format_uptime(seconds: float) -> str:
    s = max(int(seconds), 0)
    h, rem = divmod(s, 3600)
    m, sec = divmod(rem, 60)
    return f"{h:02d}:{m:02d}:{sec:02d}"


def format_pct(value: float) -> str:
    return f"{value:.1f}%"


def format_temp(value: float) -> str:
    if value == TEMP_UNAVAILABLE:
        return "N/A"
    return f"{value:.1f}°C"


def kb_to_mb(kb: int) -> int:
    return int(kb) // 1024


def bar_width(pct: float) -> float:
    return max(0.0, min(100.0, pct))


def build_view(record: TelemetryRecord, theme: ThemeConfig) -> DashboardView:
    return DashboardView(
        cpu_usage_text=format_pct(record.usage_pct),
        cpu_bar_pct=bar_width(record.usage_pct),
        cpu_bar_color=theme.critical if record.usage_pct > HIGH_USAGE_PCT else theme.ok,
        mem_used_text=format_pct(record.used_pct),
        mem_bar_pct=bar_width(record.used_pct),
        mem_bar_color=theme.critical if record.used_pct > HIGH_USAGE_PCT else theme.info,
        temp_text=format_temp(record.temp_c),
        uptime_text=format_uptime(record.uptime_sec),
        free_mb=kb_to_mb(record.free_kb),
        total_mb=kb_to_mb(record.total_kb),
    )
