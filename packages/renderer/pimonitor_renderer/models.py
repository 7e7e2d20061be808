"""Typed renderer models."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ThemeConfig:
    name: str
    background: str
    card_bg: str
    tile_bg: str
    bar_bg: str
    ok: str
    info: str
    critical: str
    text_primary: str
    text_secondary: str


@dataclass(frozen=True)
class DashboardView:
    """Display-ready strings and bar geometry for one record."""

    cpu_usage_text: str
    cpu_bar_pct: float
    cpu_bar_color: str
    mem_used_text: str
    mem_bar_pct: float
    mem_bar_color: str
    temp_text: str
    uptime_text: str
    free_mb: int
    total_mb: int
