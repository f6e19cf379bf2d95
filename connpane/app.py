"""Textual application entry point for connpane."""

from __future__ import annotations

import logging
from typing import Callable

from textual.app import App, ComposeResult
from textual.containers import Container, Horizontal
from textual.widgets import Footer, Header

from .config import AppConfig, load_config, save_config
from .formatting import connection_label
from .models import Connection, ConnectionAction, ConnectionId
from .providers import ConnectionActionProvider, ConnectionsRefreshProvider
from .registry import ConnectionRegistry, RegistryState, SortOrder
from .sources import ConnectionSourceError, DemoConnectionSource, JsonFileConnectionSource
from .widgets import ConnectionDetails, ConnectionsPane, StatusBar

LOG = logging.getLogger(__name__)

ActionHandler = Callable[[Connection, ConnectionAction], None]


def _load_app_config() -> AppConfig:
    """Load configuration with a small wrapper for future overrides."""

    return load_config()


def build_registry(config: AppConfig) -> ConnectionRegistry:
    """Create the registry described by ``config``.

    A configured snapshot file becomes the primary source with the demo
    connections as fallback; without one the demo source is used directly.
    """

    demo = DemoConnectionSource()
    order = SortOrder(config.sort_order)
    if config.source_file:
        source = JsonFileConnectionSource(config.source_file, skip_malformed=config.skip_malformed)
        return ConnectionRegistry(source, fallback_source=demo, sort_order=order)
    return ConnectionRegistry(demo, sort_order=order)


class ConnpaneApp(App[None]):
    """Connections pane: lists connections and surfaces their actions."""

    COMMANDS = App.COMMANDS | {ConnectionActionProvider, ConnectionsRefreshProvider}
    CSS = """
    Screen {
        layout: vertical;
    }
    #content {
        layout: horizontal;
        height: 1fr;
    }
    #main-column {
        layout: vertical;
        height: 1fr;
        border-left: solid $surface-darken-1;
    }
    """

    BINDINGS = [
        ("ctrl+c", "quit", "Quit"),
        ("ctrl+r", "refresh", "Refresh"),
        ("s", "toggle_sort", "Toggle sort"),
        ("ctrl+p", "command_palette", "Command Palette"),
    ]

    def __init__(
        self,
        *,
        registry: ConnectionRegistry | None = None,
        action_handler: ActionHandler | None = None,
    ) -> None:
        super().__init__()
        self._config = _load_app_config()
        self._connection_registry = registry or build_registry(self._config)
        self._action_handler = action_handler
        self._details: ConnectionDetails | None = None
        self._last_state: RegistryState | None = None
        self._pending_notifications: list[tuple[str, str]] = []
        self._registry_unsubscribe: Callable[[], None] | None = self._connection_registry.subscribe(
            self._handle_registry_state
        )
        if self._connection_registry.state is None:
            self._initial_refresh()

    def compose(self) -> ComposeResult:
        """Compose the root layout."""

        yield Header(show_clock=True)
        pane = ConnectionsPane(
            self._connection_registry,
            last_used_unit=self._config.last_used_unit,
            width=self._config.layout.pane_width,
        )
        self._details = ConnectionDetails(last_used_unit=self._config.last_used_unit)
        main_column = Container(self._details, id="main-column")
        yield Horizontal(pane, main_column, id="content")
        yield StatusBar(self._connection_registry)
        yield Footer()

    async def on_mount(self) -> None:
        self._flush_pending_notifications()

    @property
    def registry(self) -> ConnectionRegistry:
        """Expose the registry for providers and tests."""

        return self._connection_registry

    @property
    def app_config(self) -> AppConfig:
        return self._config

    @property
    def pending_notifications(self) -> tuple[tuple[str, str], ...]:
        """Notifications queued before the app started (testing helper)."""

        return tuple(self._pending_notifications)

    def action_refresh(self) -> None:
        try:
            self._connection_registry.refresh()
        except ConnectionSourceError as exc:
            LOG.warning("Connection refresh failed", extra={"error": str(exc)})
            self._safe_notify(f"Refresh failed: {exc}", severity="error")

    def action_toggle_sort(self) -> None:
        order = SortOrder.NAME if self._connection_registry.sort_order is SortOrder.RECENT else SortOrder.RECENT
        self._connection_registry.set_sort_order(order)
        self._config = self._config.with_sort_order(order.value)
        save_config(self._config)

    def request_action(self, connection_id: ConnectionId, action: ConnectionAction | str) -> bool:
        """Hand a connection action to the configured handler.

        The app never executes actions itself; it resolves the action against
        the current record, logs the request and forwards it.
        """

        connection = self._connection_registry.get(connection_id)
        if connection is None:
            self._safe_notify(f"Connection '{connection_id.host}' not found.", severity="error")
            return False
        resolved = self._resolve_action(connection, action)
        if resolved is None:
            self._safe_notify(
                f"{connection_label(connection)} has no action '{action}'.",
                severity="error",
            )
            return False
        LOG.info(
            "Connection action requested",
            extra={"host": connection.host, "action": resolved.name},
        )
        if self._action_handler is not None:
            try:
                self._action_handler(connection, resolved)
            except Exception:
                LOG.exception("Connection action handler failed", extra={"host": connection.host})
                self._safe_notify(f"{resolved.name} failed for {connection_label(connection)}.", severity="error")
                return False
        self._safe_notify(f"{resolved.name} requested for {connection_label(connection)}.")
        return True

    def on_connections_pane_connection_selected(self, event: ConnectionsPane.ConnectionSelected) -> None:
        if self._details is not None:
            self._details.show(event.connection)

    def on_connections_pane_action_requested(self, event: ConnectionsPane.ActionRequested) -> None:
        self.request_action(event.connection_id, event.action)

    async def _shutdown(self) -> None:
        if self._registry_unsubscribe:
            self._registry_unsubscribe()
            self._registry_unsubscribe = None
        await super()._shutdown()

    def _initial_refresh(self) -> None:
        try:
            self._connection_registry.refresh()
        except ConnectionSourceError as exc:
            LOG.warning("Initial connection load failed", extra={"error": str(exc)})
            self._safe_notify(f"Failed to load connections: {exc}", severity="error")

    @staticmethod
    def _resolve_action(connection: Connection, action: ConnectionAction | str) -> ConnectionAction | None:
        if isinstance(action, ConnectionAction):
            return action if action in connection.actions else None
        for candidate in connection.actions:
            if candidate.name == action:
                return candidate
        return None

    def _handle_registry_state(self, state: RegistryState) -> None:
        self._maybe_notify_state_change(state)
        self._sync_details(state)
        self._last_state = state

    def _sync_details(self, state: RegistryState) -> None:
        if self._details is None or self._details.connection is None:
            return
        shown = self._details.connection
        for connection in state.connections:
            if connection.id == shown.id:
                if connection != shown:
                    self._details.show(connection)
                return
        self._details.show(None)

    def _maybe_notify_state_change(self, state: RegistryState) -> None:
        previous = self._last_state
        if state.using_fallback and (not previous or not previous.using_fallback):
            reason = ""
            if state.last_error:
                reason = f" ({state.last_error.splitlines()[0][:120]})"
            self._safe_notify(
                f"Connection source unavailable, showing {state.source_label}{reason}.",
                severity="warning",
            )
        elif previous and previous.using_fallback and not state.using_fallback:
            self._safe_notify(f"Reconnected to {state.source_label}.", severity="information")

    def _safe_notify(self, text: str, *, severity: str = "information") -> None:
        if self.is_running:
            try:
                self.notify(text, severity=severity)
            except Exception:
                LOG.exception("Failed to display notification", extra={"notice": text})
        else:
            self._pending_notifications.append((text, severity))

    def _flush_pending_notifications(self) -> None:
        if not self._pending_notifications:
            return
        pending = list(self._pending_notifications)
        self._pending_notifications.clear()
        for text, severity in pending:
            try:
                self.notify(text, severity=severity)
            except Exception:
                LOG.exception("Failed to display queued notification", extra={"notice": text})


def main() -> None:
    """Invoke the Textual application."""

    ConnpaneApp().run()


if __name__ == "__main__":
    main()
