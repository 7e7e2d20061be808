"""Persistent app settings schema and load/save helpers."""

from __future__ import annotations

import json
import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

from pimonitor_renderer.themes import DEFAULT_THEME_NAME, THEMES
from pimonitor_telemetry.sources import PROC_MEMINFO_PATH, PROC_STAT_PATH, PROC_UPTIME_PATH, THERMAL_ZONE_PATH


CONFIG_VERSION = 1


@dataclass
class SamplerConfig:
    period_s: float = 1.0
    log_path: str = "monitor.log"
    budget_every: int = 60


@dataclass
class SourcesConfig:
    proc_stat: str = PROC_STAT_PATH
    thermal_zone: str = THERMAL_ZONE_PATH
    proc_uptime: str = PROC_UPTIME_PATH
    proc_meminfo: str = PROC_MEMINFO_PATH


@dataclass
class StoreConfig:
    window_bytes: int = 1024
    max_window_bytes: int = 1024


@dataclass
class ServerConfig:
    host: str = "0.0.0.0"
    port: int = 8080
    refresh_s: int = 1


@dataclass
class UiConfig:
    dashboard_theme: str = DEFAULT_THEME_NAME
    title: str = "Raspberry Pi Monitor"


@dataclass
class DiagnosticsConfig:
    keep_log_files: int = 7
    max_bundle_mb: int = 20


@dataclass
class PerformanceConfig:
    cpu_percent_max: float = 5.0
    rss_mb_max: float = 64.0


@dataclass
class AppConfig:
    config_version: int = CONFIG_VERSION
    sampler: SamplerConfig = field(default_factory=SamplerConfig)
    sources: SourcesConfig = field(default_factory=SourcesConfig)
    store: StoreConfig = field(default_factory=StoreConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    ui: UiConfig = field(default_factory=UiConfig)
    diagnostics: DiagnosticsConfig = field(default_factory=DiagnosticsConfig)
    performance: PerformanceConfig = field(default_factory=PerformanceConfig)


def config_root() -> Path:
    base = os.environ.get("XDG_CONFIG_HOME")
    return (Path(base) if base else Path.home() / ".config") / "pimonitor"


def config_path() -> Path:
    return config_root() / "config.json"


def _merge(dataclass_type, raw: dict[str, Any]):
    defaults = dataclass_type()  # type: ignore[misc]
    if not isinstance(raw, dict):
        return defaults
    for k, v in raw.items():
        if hasattr(defaults, k):
            setattr(defaults, k, v)
    return defaults


def _normalize_sampler(cfg: AppConfig) -> None:
    cfg.sampler.period_s = float(max(0.1, min(3600.0, float(cfg.sampler.period_s))))
    cfg.sampler.budget_every = max(1, int(cfg.sampler.budget_every))
    cfg.sampler.log_path = str(cfg.sampler.log_path)


def _normalize_store(cfg: AppConfig) -> None:
    cfg.store.window_bytes = max(128, int(cfg.store.window_bytes))
    cfg.store.max_window_bytes = max(cfg.store.window_bytes, int(cfg.store.max_window_bytes))


def _normalize_server(cfg: AppConfig) -> None:
    port = int(cfg.server.port)
    if not 1 <= port <= 65535:
        port = ServerConfig.port
    cfg.server.port = port
    cfg.server.refresh_s = max(1, int(cfg.server.refresh_s))


def _normalize_ui(cfg: AppConfig) -> None:
    if cfg.ui.dashboard_theme not in THEMES:
        cfg.ui.dashboard_theme = DEFAULT_THEME_NAME


def normalize(cfg: AppConfig) -> AppConfig:
    _normalize_sampler(cfg)
    _normalize_store(cfg)
    _normalize_server(cfg)
    _normalize_ui(cfg)
    return cfg


def load_config(path: Path | None = None) -> AppConfig:
    path = path or config_path()
    if not path.exists():
        return AppConfig()

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except Exception:
        return AppConfig()
    if not isinstance(data, dict):
        return AppConfig()

    cfg = AppConfig(
        config_version=int(data.get("config_version", CONFIG_VERSION)),
        sampler=_merge(SamplerConfig, data.get("sampler", {})),
        sources=_merge(SourcesConfig, data.get("sources", {})),
        store=_merge(StoreConfig, data.get("store", {})),
        server=_merge(ServerConfig, data.get("server", {})),
        ui=_merge(UiConfig, data.get("ui", {})),
        diagnostics=_merge(DiagnosticsConfig, data.get("diagnostics", {})),
        performance=_merge(PerformanceConfig, data.get("performance", {})),
    )
    return normalize(cfg)


def save_config(cfg: AppConfig, path: Path | None = None) -> Path:
    cfg.config_version = CONFIG_VERSION
    path = path or config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(asdict(cfg), indent=2, sort_keys=True), encoding="utf-8")
    return path
