import pytest

from artco.config.settings import MonitoringSettings, Settings, StatusServerSettings
from artco.main import ArtcoApplication
from artco.monitoring.watcher import AvailabilityState
from tests.conftest import wait_until


def _app(**monitoring):
    app = ArtcoApplication()
    app.settings = Settings(
        monitoring=MonitoringSettings(**monitoring),
        status=StatusServerSettings(enabled=False),
    )
    return app


@pytest.mark.asyncio
async def test_application_registers_configured_watchers_and_polls():
    app = _app(
        ping_interval_millis=10,
        http_targets={"broken": "not-a-url"},
        tcp_targets={"db": "127.0.0.1:1"},
    )

    assert await app.startup()
    assert {s.identity for s in app.engine.list_watchers()} == {"Ping", "db"}

    await wait_until(
        lambda: app.engine.get_watcher("Ping").state is AvailabilityState.AVAILABLE
    )
    await app.shutdown()

    assert not app.engine.is_running
    assert all(not s.worker_alive for s in app.engine.list_watchers())


@pytest.mark.asyncio
async def test_startup_fails_without_watchers():
    app = _app(echo_enabled=False)
    assert await app.startup() is False
