"""CLI entrypoints for the PiMonitor sampler, dashboard server, and diagnostics."""

from __future__ import annotations

import argparse
import json
import signal
import threading
from pathlib import Path

from pimonitor_core import (
    AppConfig,
    DiagnosticsExporter,
    PerformanceController,
    PerformanceTargets,
    build_doctor_payload,
    load_config,
    normalize,
    sources_from_config,
)
from pimonitor_core.logging_setup import configure_logging, get_logger, install_crash_hooks
from pimonitor_logstore import LatestRecordExtractor, LogWriter
from pimonitor_telemetry import Sampler, SamplerStartupError, WriteFailure


EXIT_NO_DATA = 1
EXIT_FATAL = 2


def _print_json(data: object) -> None:
    print(json.dumps(data, indent=2, sort_keys=True, default=str))


def _load(args: argparse.Namespace) -> AppConfig:
    cfg = load_config(Path(args.config) if args.config else None)
    if getattr(args, "log_path", None):
        cfg.sampler.log_path = args.log_path
    if getattr(args, "period", None) is not None:
        cfg.sampler.period_s = args.period
    if getattr(args, "host", None):
        cfg.server.host = args.host
    if getattr(args, "port", None) is not None:
        cfg.server.port = args.port
    return normalize(cfg)


def _install_stop_signals(stop: threading.Event) -> None:
    def _handler(signum, _frame) -> None:
        get_logger().info("signal %s received, stopping", signum, extra={"event": "stop_signal"})
        stop.set()

    signal.signal(signal.SIGTERM, _handler)
    signal.signal(signal.SIGINT, _handler)


def cmd_sample(args: argparse.Namespace) -> int:
    cfg = _load(args)
    budget = PerformanceController(
        PerformanceTargets(
            cpu_percent_max=cfg.performance.cpu_percent_max,
            rss_mb_max=cfg.performance.rss_mb_max,
        )
    )
    stop = threading.Event()
    _install_stop_signals(stop)

    try:
        with LogWriter(cfg.sampler.log_path) as writer:
            sampler = Sampler(
                sources_from_config(cfg),
                writer,
                period_s=cfg.sampler.period_s,
                budget=budget,
                budget_every=cfg.sampler.budget_every,
            )
            sampler.run(max_ticks=args.ticks, stop_event=stop)
    except (SamplerStartupError, WriteFailure) as exc:
        get_logger().critical("sampler terminated: %s", exc, extra={"event": "sampler_fatal"})
        return EXIT_FATAL
    return 0


def cmd_serve(args: argparse.Namespace) -> int:
    from .server import run_server

    run_server(_load(args))
    return 0


def cmd_latest(args: argparse.Namespace) -> int:
    cfg = _load(args)
    extractor = LatestRecordExtractor(
        cfg.sampler.log_path,
        window_bytes=cfg.store.window_bytes,
        max_window_bytes=cfg.store.max_window_bytes,
    )
    record = extractor.latest()
    if record is None:
        print("no data")
        return EXIT_NO_DATA
    _print_json(record.as_dict())
    return 0


def cmd_doctor(args: argparse.Namespace) -> int:
    cfg = _load(args)
    payload = build_doctor_payload(cfg)

    if args.export:
        exporter = DiagnosticsExporter()
        out_dir = Path(args.out_dir).expanduser().resolve() if args.out_dir else None
        bundle = exporter.bundle(cfg=cfg, doctor_payload=payload, output_dir=out_dir)
        payload["diagnostics_bundle"] = str(bundle)

    _print_json(payload)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="pimonitor", description="Single-board computer telemetry sampler and dashboard")
    parser.add_argument("--config", default=None, help="Path to config.json (defaults to ~/.config/pimonitor)")
    sub = parser.add_subparsers(dest="command", required=True)

    sample_cmd = sub.add_parser("sample", help="Append one telemetry record per tick to the log")
    sample_cmd.add_argument("--period", type=float, default=None, help="Seconds between ticks")
    sample_cmd.add_argument("--log-path", default=None, help="Append-only log file")
    sample_cmd.add_argument("--ticks", type=int, default=None, help="Stop after N ticks")
    sample_cmd.set_defaults(func=cmd_sample, log_name="sampler.log")

    serve_cmd = sub.add_parser("serve", help="Serve the dashboard for the latest record")
    serve_cmd.add_argument("--host", default=None)
    serve_cmd.add_argument("--port", type=int, default=None)
    serve_cmd.add_argument("--log-path", default=None, help="Log file written by the sampler")
    serve_cmd.set_defaults(func=cmd_serve, log_name="server.log")

    latest_cmd = sub.add_parser("latest", help="Print the latest record as JSON")
    latest_cmd.add_argument("--log-path", default=None)
    latest_cmd.set_defaults(func=cmd_latest, log_name="pimonitor.log")

    doctor_cmd = sub.add_parser("doctor", help="Print diagnostics for sources and the log file")
    doctor_cmd.add_argument("--export", action="store_true", help="Export offline diagnostics bundle")
    doctor_cmd.add_argument("--out-dir", default=None, help="Optional output directory for diagnostics bundle")
    doctor_cmd.set_defaults(func=cmd_doctor, log_name="pimonitor.log")

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    interactive = args.command in ("sample", "serve")
    keep_files = _load(args).diagnostics.keep_log_files
    configure_logging(keep_files=keep_files, console=interactive, filename=args.log_name)
    if interactive:
        install_crash_hooks()
    return int(args.func(args))


if __name__ == "__main__":
    raise SystemExit(main())
