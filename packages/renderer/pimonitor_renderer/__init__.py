"""Renderer package for the PiMonitor dashboard."""

from .formatting import NO_DATA_TEXT, build_view, format_pct, format_temp, format_uptime, kb_to_mb
from .models import DashboardView, ThemeConfig
from .themes import DEFAULT_THEME_NAME, get_theme, list_themes

try:  # pragma: no cover - optional at import time for test environments
    from .dashboard import DashboardRenderer
except Exception:  # pragma: no cover
    DashboardRenderer = None  # type: ignore[assignment]

__all__ = [
    "DEFAULT_THEME_NAME",
    "DashboardView",
    "NO_DATA_TEXT",
    "ThemeConfig",
    "build_view",
    "format_pct",
    "format_temp",
    "format_uptime",
    "get_theme",
    "kb_to_mb",
    "list_themes",
]

if DashboardRenderer is not None:
    __all__.append("DashboardRenderer")
