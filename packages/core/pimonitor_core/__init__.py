"""Core app services for settings, logging, diagnostics, and the sampler budget."""

from .config import AppConfig, load_config, normalize, save_config
from .diagnostics import DiagnosticsExporter, build_doctor_payload, sources_from_config
from .performance import BudgetStatus, PerformanceController, PerformanceTargets

__all__ = [
    "AppConfig",
    "BudgetStatus",
    "DiagnosticsExporter",
    "PerformanceController",
    "PerformanceTargets",
    "build_doctor_payload",
    "load_config",
    "normalize",
    "save_config",
    "sources_from_config",
]
