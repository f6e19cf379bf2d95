"""App-level tests for the Connections pane."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from connpane.app import ConnpaneApp, build_registry
from connpane.config import AppConfig
from connpane.models import Connection, ConnectionAction, ConnectionId
from connpane.providers import ConnectionActionProvider, ConnectionsRefreshProvider
from connpane.registry import ConnectionRegistry, SortOrder
from connpane.sources import ConnectionSourceError, DemoConnectionSource, JsonFileConnectionSource
from connpane.widgets import ConnectionDetails, ConnectionsPane, StatusBar

PRESETS: tuple[tuple[dict[str, Any], ...], ...] = (
    (
        {
            "id": {"type": "PostgreSQL", "host": "db1.example.com"},
            "display_name": "Prod DB",
            "connect_code": "engine = create_engine(...)",
            "actions": [{"name": "Disconnect"}, {"name": "View data"}],
            "last_used": 1700000000.0,
        },
        {
            "id": {"type": "SQLite", "host": "local.sqlite"},
            "display_name": "Local",
            "actions": [],
            "last_used": 1600000000.0,
        },
    ),
)


class _DummyScreen:
    def __init__(self, app: ConnpaneApp) -> None:
        self.app = app


class _FailingSource:
    label = "Broken source"

    def fetch(self):  # type: ignore[no-untyped-def]
        raise ConnectionSourceError("snapshot unreadable")


@pytest.fixture(autouse=True)
def default_config(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setattr("connpane.config.CONFIG_FILE", tmp_path / "config.toml")
    monkeypatch.setattr("connpane.app._load_app_config", lambda: AppConfig())


def _registry() -> ConnectionRegistry:
    return ConnectionRegistry(DemoConnectionSource(PRESETS))


def test_build_registry_uses_file_source_with_demo_fallback(tmp_path: Path) -> None:
    registry = build_registry(AppConfig(source_file=str(tmp_path / "missing.json"), sort_order="name"))

    state = registry.refresh()

    assert registry.sort_order is SortOrder.NAME
    assert state.using_fallback is True
    assert "not found" in (state.last_error or "")


def test_build_registry_defaults_to_demo_source() -> None:
    registry = build_registry(AppConfig())

    assert registry.refresh().source_label == "Demo connections"


def test_app_loads_connections_on_startup() -> None:
    app = ConnpaneApp(registry=_registry())

    assert app.registry.state is not None
    assert [conn.host for conn in app.registry.connections] == ["db1.example.com", "local.sqlite"]


def test_app_queues_notification_when_source_fails() -> None:
    app = ConnpaneApp(registry=ConnectionRegistry(_FailingSource()))

    assert app.registry.state is None
    assert any("Failed to load connections" in text for text, _ in app.pending_notifications)


def test_app_notifies_when_falling_back() -> None:
    registry = ConnectionRegistry(_FailingSource(), fallback_source=DemoConnectionSource(PRESETS))

    app = ConnpaneApp(registry=registry)

    assert app.registry.state is not None and app.registry.state.using_fallback
    assert any(severity == "warning" for _, severity in app.pending_notifications)


def test_request_action_forwards_to_handler() -> None:
    seen: list[tuple[Connection, ConnectionAction]] = []
    app = ConnpaneApp(registry=_registry(), action_handler=lambda conn, action: seen.append((conn, action)))

    handled = app.request_action(ConnectionId(host="db1.example.com", type="PostgreSQL"), "View data")

    assert handled is True
    assert seen[0][0].display_name == "Prod DB"
    assert seen[0][1].name == "View data"


def test_request_action_rejects_unknown_targets() -> None:
    seen: list[object] = []
    app = ConnpaneApp(registry=_registry(), action_handler=lambda conn, action: seen.append(action))

    assert app.request_action(ConnectionId(host="nowhere"), "Disconnect") is False
    assert app.request_action(ConnectionId(host="local.sqlite", type="SQLite"), "Disconnect") is False
    assert not seen


def test_request_action_reports_handler_failure() -> None:
    def _broken(conn: Connection, action: ConnectionAction) -> None:
        raise RuntimeError("handler bug")

    app = ConnpaneApp(registry=_registry(), action_handler=_broken)

    assert app.request_action(ConnectionId(host="db1.example.com", type="PostgreSQL"), "Disconnect") is False
    assert any(severity == "error" for _, severity in app.pending_notifications)


def test_toggle_sort_persists_choice(tmp_path: Path) -> None:
    app = ConnpaneApp(registry=_registry())

    app.action_toggle_sort()

    assert app.registry.sort_order is SortOrder.NAME
    assert [conn.display_name for conn in app.registry.connections] == ["Local", "Prod DB"]
    assert 'sort_order = "name"' in (tmp_path / "config.toml").read_text()


@pytest.mark.anyio
async def test_action_provider_lists_named_actions() -> None:
    seen: list[str] = []
    app = ConnpaneApp(registry=_registry(), action_handler=lambda conn, action: seen.append(action.name or ""))
    provider = ConnectionActionProvider(_DummyScreen(app))  # type: ignore[arg-type]

    hits = [hit async for hit in provider.discover()]
    displays = [hit.display for hit in hits]
    assert displays == ["Disconnect: Prod DB", "View data: Prod DB"]

    await hits[1].command()
    assert seen == ["View data"]


@pytest.mark.anyio
async def test_refresh_provider_triggers_refresh() -> None:
    app = ConnpaneApp(registry=_registry())
    first = app.registry.state
    provider = ConnectionsRefreshProvider(_DummyScreen(app))  # type: ignore[arg-type]

    hits = [hit async for hit in provider.discover()]
    assert hits
    await hits[0].command()

    assert app.registry.state is not first


@pytest.mark.anyio
async def test_pane_shows_highlighted_connection() -> None:
    app = ConnpaneApp(registry=_registry())

    async with app.run_test() as pilot:
        await pilot.pause()
        await pilot.pause()
        pane = app.query_one(ConnectionsPane)
        details = app.query_one(ConnectionDetails)
        status = app.query_one(StatusBar)

        assert pane.current is not None
        assert pane.current.host == "db1.example.com"
        assert details.connection == pane.current
        assert "Connect code:" in details.render_text()
        assert app.registry.state is not None
        assert "Connections: 2" in StatusBar.describe(app.registry.state)
        assert status.id == "status-bar"


def test_file_backed_app_reads_snapshot(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    snapshot = tmp_path / "connections.json"
    snapshot.write_text('[{"id": {"host": "warehouse"}, "display_name": "Warehouse"}]', encoding="utf-8")
    monkeypatch.setattr("connpane.app._load_app_config", lambda: AppConfig(source_file=str(snapshot)))

    app = ConnpaneApp()

    assert isinstance(JsonFileConnectionSource(snapshot).fetch()[0], Connection)
    assert [conn.host for conn in app.registry.connections] == ["warehouse"]
    assert app.registry.state is not None and app.registry.state.using_fallback is False


@pytest.mark.anyio
async def test_mounted_app_composes_widgets_and_toggles_sort() -> None:
    app = ConnpaneApp(registry=_registry())

    async with app.run_test() as pilot:
        await pilot.pause()
        assert app.query_one(StatusBar).id == "status-bar"
        assert app.query_one(ConnectionsPane).id == "connections-pane"
        assert isinstance(app.registry, ConnectionRegistry)
        await pilot.press("s")
        assert app.registry.sort_order is SortOrder.NAME
