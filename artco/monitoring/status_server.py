"""
============================================================================
ARTCO - STATUS SERVER
============================================================================
A lightweight aiohttp server exposing the latest snapshot of every
watcher. It serves current state only; no history is kept.

    GET /                       → 200 "OK"       (liveness)
    GET /health                 → 200 JSON       engine summary
    GET /watchers               → 200 JSON       every watcher snapshot
    GET /watchers/{identity}    → 200 JSON | 404 one watcher snapshot
============================================================================
"""

import time
from datetime import datetime, timezone
from typing import Optional

from aiohttp import web

from artco.config.settings import StatusServerSettings, get_settings
from artco.monitoring.engine import Artco
from artco.utils.helpers import TimeHelper
from artco.utils.logger import get_logger


logger = get_logger("StatusServer")


class StatusServer:
    """
    Read-only HTTP view over an engine.

    Attributes
    ----------
    app : aiohttp.web.Application
        Exposed so it can be mounted or served by a test client.
    """

    def __init__(self, engine: Artco, settings: Optional[StatusServerSettings] = None):
        self.engine = engine
        self.settings = settings or get_settings().status
        self.app = web.Application()
        self._runner: Optional[web.AppRunner] = None
        self._site: Optional[web.TCPSite] = None
        self._start_time: float = time.time()
        self._request_count: int = 0

        # Register routes
        self.app.router.add_get("/", self._handle_root)
        self.app.router.add_get("/health", self._handle_health)
        self.app.router.add_get("/watchers", self._handle_watchers)
        self.app.router.add_get("/watchers/{identity}", self._handle_watcher)

    async def start(self) -> None:
        """Bind and start serving."""
        self._start_time = time.time()
        self._runner = web.AppRunner(self.app)
        await self._runner.setup()
        self._site = web.TCPSite(self._runner, self.settings.host, self.settings.port)
        await self._site.start()
        logger.info(f"✓ StatusServer listening on {self.settings.host}:{self.settings.port}")

    async def stop(self) -> None:
        """Gracefully shut down the server."""
        if self._runner:
            await self._runner.cleanup()
            self._runner = None
            self._site = None
        logger.info("✓ StatusServer stopped")

    # ------------------------------------------------------------------
    # ROUTE HANDLERS
    # ------------------------------------------------------------------

    async def _handle_root(self, request: web.Request) -> web.Response:
        """GET / — simple liveness probe."""
        self._request_count += 1
        return web.Response(text="OK", status=200)

    async def _handle_health(self, request: web.Request) -> web.Response:
        """GET /health — engine summary."""
        self._request_count += 1
        uptime_seconds = time.time() - self._start_time

        health = {
            "status": "running" if self.engine.is_running else "stopped",
            "uptime_seconds": round(uptime_seconds, 1),
            "uptime_human": TimeHelper.seconds_to_human_readable(int(uptime_seconds)),
            "requests_served": self._request_count,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "engine": self.engine.get_stats(),
        }
        return web.json_response(health, status=200)

    async def _handle_watchers(self, request: web.Request) -> web.Response:
        """GET /watchers — latest snapshot of every watcher."""
        self._request_count += 1
        watchers = [snapshot.to_dict() for snapshot in self.engine.list_watchers()]
        return web.json_response({"watchers": watchers}, status=200)

    async def _handle_watcher(self, request: web.Request) -> web.Response:
        """GET /watchers/{identity} — latest snapshot of one watcher."""
        self._request_count += 1
        identity = request.match_info["identity"]
        snapshot = self.engine.get_watcher(identity)
        if snapshot is None:
            return web.json_response(
                {"error": f"Unknown service watcher: {identity}"}, status=404
            )
        return web.json_response(snapshot.to_dict(), status=200)
