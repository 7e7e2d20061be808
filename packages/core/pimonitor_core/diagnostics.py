"""Diagnostics export helpers for local support bundles."""

from __future__ import annotations

import json
import platform
import re
import tempfile
import zipfile
from dataclasses import asdict, is_dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from pimonitor_logstore import LatestRecordExtractor
from pimonitor_telemetry import TelemetrySources

from .config import AppConfig, config_path
from .logging_setup import log_dir
from .performance import PerformanceController, PerformanceTargets


_SECRET_RE = re.compile(r"(token|secret|password|apikey|api_key|auth)", re.IGNORECASE)


def _jsonable(value: Any) -> Any:
    if is_dataclass(value):
        return asdict(value)
    if isinstance(value, Path):
        return str(value)
    return value


def redact(value: Any) -> Any:
    if isinstance(value, dict):
        out: dict[str, Any] = {}
        for k, v in value.items():
            if _SECRET_RE.search(k):
                out[k] = "***REDACTED***"
            else:
                out[k] = redact(v)
        return out
    if isinstance(value, list):
        return [redact(v) for v in value]
    return value


def sources_from_config(cfg: AppConfig) -> TelemetrySources:
    return TelemetrySources(
        proc_stat=cfg.sources.proc_stat,
        thermal_zone=cfg.sources.thermal_zone,
        proc_uptime=cfg.sources.proc_uptime,
        proc_meminfo=cfg.sources.proc_meminfo,
    )


def _log_file_info(cfg: AppConfig) -> dict[str, Any]:
    path = Path(cfg.sampler.log_path)
    info: dict[str, Any] = {"path": str(path), "exists": path.exists(), "size_bytes": None, "latest": None}
    if not path.exists():
        return info
    info["size_bytes"] = path.stat().st_size
    extractor = LatestRecordExtractor(path, cfg.store.window_bytes, cfg.store.max_window_bytes)
    record = extractor.latest()
    info["latest"] = record.as_dict() if record is not None else None
    return info


def build_doctor_payload(cfg: AppConfig) -> dict[str, Any]:
    budget = PerformanceController(
        PerformanceTargets(
            cpu_percent_max=cfg.performance.cpu_percent_max,
            rss_mb_max=cfg.performance.rss_mb_max,
        )
    ).sample()
    return {
        "ts_utc": datetime.now(timezone.utc).isoformat(),
        "platform": platform.platform(),
        "python": platform.python_version(),
        "config": redact(asdict(cfg)),
        "sources": sources_from_config(cfg).probe(),
        "log_file": _log_file_info(cfg),
        "process": asdict(budget),
    }


class DiagnosticsExporter:
    def __init__(self, app_name: str = "PiMonitor") -> None:
        self.app_name = app_name

    def bundle(
        self,
        cfg: AppConfig,
        doctor_payload: dict[str, Any],
        output_dir: Path | None = None,
    ) -> Path:
        output_base = output_dir or Path(tempfile.gettempdir())
        output_base.mkdir(parents=True, exist_ok=True)
        stamp = datetime.now().strftime("%Y%m%d-%H%M%S")
        zip_path = output_base / f"pimonitor-diagnostics-{stamp}.zip"

        logs = sorted(log_dir().glob("*.log*"))
        max_bytes = cfg.diagnostics.max_bundle_mb * 1024 * 1024

        with zipfile.ZipFile(zip_path, "w", compression=zipfile.ZIP_DEFLATED) as zf:
            manifest = {
                "app": self.app_name,
                "created_utc": datetime.now(timezone.utc).isoformat(),
                "host": platform.platform(),
                "python": platform.python_version(),
                "config_path": str(config_path()),
                "log_dir": str(log_dir()),
            }
            zf.writestr("manifest.json", json.dumps(manifest, indent=2, sort_keys=True))
            zf.writestr("doctor.json", json.dumps(redact(doctor_payload), indent=2, sort_keys=True, default=_jsonable))
            zf.writestr("config.redacted.json", json.dumps(redact(asdict(cfg)), indent=2, sort_keys=True))

            written = 0
            for item in logs:
                size = item.stat().st_size
                if written + size > max_bytes:
                    break
                zf.write(item, arcname=f"logs/{item.name}")
                written += size

        return zip_path
