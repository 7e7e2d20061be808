"""HTTP presenter: serves the latest log record as a dashboard."""

from __future__ import annotations

import asyncio
import logging

from aiohttp import web

from pimonitor_core.config import AppConfig
from pimonitor_logstore import LatestRecordExtractor
from pimonitor_renderer import NO_DATA_TEXT, DashboardRenderer
from pimonitor_telemetry.codec import encode_record

LOGGER = logging.getLogger(__name__)


class DashboardServer:
    """Every request reads the log tail afresh; handlers share no mutable state.

    Tail reads and PNG rendering run in worker threads off the event loop.
    """

    def __init__(self, config: AppConfig) -> None:
        self._config = config
        self._extractor = LatestRecordExtractor(
            config.sampler.log_path,
            window_bytes=config.store.window_bytes,
            max_window_bytes=config.store.max_window_bytes,
        )
        self._renderer = DashboardRenderer(config.ui.dashboard_theme, title=config.ui.title)
        self._app = web.Application()
        self._app.add_routes([
            web.get("/", self._dashboard),
            web.get("/dashboard.png", self._dashboard_png),
            web.get("/api/latest", self._latest_json),
            web.get("/health", self._health),
        ])

    @property
    def app(self) -> web.Application:
        return self._app

    async def _latest(self):
        return await asyncio.to_thread(self._extractor.latest)

    async def _health(self, request: web.Request) -> web.Response:
        return web.json_response({"status": "ok"})

    async def _dashboard(self, request: web.Request) -> web.Response:
        record = await self._latest()
        if record is None:
            return web.Response(text=NO_DATA_TEXT, content_type="text/plain")
        body = self._renderer.render_html(record, refresh_s=self._config.server.refresh_s)
        return web.Response(text=body, content_type="text/html")

    async def _dashboard_png(self, request: web.Request) -> web.Response:
        record = await self._latest()
        if record is None:
            return web.Response(status=503, text=NO_DATA_TEXT, content_type="text/plain")
        png = await asyncio.to_thread(self._renderer.render_png, record)
        return web.Response(body=png, content_type="image/png")

    async def _latest_json(self, request: web.Request) -> web.Response:
        record = await self._latest()
        if record is None:
            return web.json_response({"error": "no_data"}, status=404)
        # Encoded log line: the timestamp keeps all nine fraction digits.
        return web.Response(text=encode_record(record).rstrip("\n"), content_type="application/json")

    def run(self) -> None:
        LOGGER.info(
            "dashboard serving %s on %s:%d",
            self._config.sampler.log_path,
            self._config.server.host,
            self._config.server.port,
            extra={"event": "server_started"},
        )
        web.run_app(self._app, host=self._config.server.host, port=self._config.server.port, print=None)


def build_app(config: AppConfig) -> web.Application:
    return DashboardServer(config).app


def run_server(config: AppConfig) -> None:
    DashboardServer(config).run()
