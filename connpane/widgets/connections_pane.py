"""Connections pane listing known connections and their actions."""

from __future__ import annotations

from typing import Callable

from textual import events, on
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Container, Vertical
from textual.content import Content
from textual.message import Message
from textual.widgets import Button, Label, ListItem, ListView, Static

from connpane.formatting import action_label, connection_label, describe_last_used
from connpane.models import Connection, ConnectionAction, ConnectionId
from connpane.registry import ConnectionRegistry, RegistryState


class _ActionChosen(Message):
    """Internal message from the action menu to the pane."""

    def __init__(self, action: ConnectionAction) -> None:
        super().__init__()
        self.action = action


class ConnectionsPane(Container):
    """Displays the registry's connections, most relevant first."""

    BINDINGS = [
        Binding("m", "focus_actions", "Actions", show=False),
    ]

    DEFAULT_CSS = """
    ConnectionsPane {
        width: 34;
        min-width: 22;
        border-right: solid $surface-darken-1;
        padding: 1;
        height: 1fr;
        background: $surface-darken-2;
    }

    ConnectionsPane .pane-heading {
        text-style: bold;
        margin-bottom: 1;
    }

    #connection-list {
        height: 1fr;
        min-height: 4;
        border: round $primary 30%;
        margin-bottom: 1;
    }

    #connection-summary {
        padding-top: 1;
        border-top: solid $surface-darken-1;
        color: $text-muted;
        min-height: 3;
    }
    """

    class ConnectionSelected(Message):
        """Posted when a connection is highlighted or selected."""

        def __init__(self, connection: Connection) -> None:
            super().__init__()
            self.connection = connection

    class ActionRequested(Message):
        """Posted when the user picks one of a connection's actions."""

        def __init__(self, connection_id: ConnectionId, action: ConnectionAction) -> None:
            super().__init__()
            self.connection_id = connection_id
            self.action = action

    def __init__(
        self,
        registry: ConnectionRegistry,
        *,
        last_used_unit: str = "seconds",
        width: int | None = None,
    ) -> None:
        super().__init__(id="connections-pane")
        self._registry = registry
        self._last_used_unit = last_used_unit
        self._list: ListView | None = None
        self._summary: Static | None = None
        self._action_menu: _ActionMenu | None = None
        self._current: Connection | None = None
        self._unsubscribe: Callable[[], None] | None = None
        if width:
            self.styles.width = width

    @property
    def current(self) -> Connection | None:
        """Connection currently highlighted in the list."""

        return self._current

    def compose(self) -> ComposeResult:
        yield Static("Connections", classes="pane-heading")
        self._list = ListView(id="connection-list")
        yield self._list
        self._action_menu = _ActionMenu()
        yield self._action_menu
        self._summary = Static("No connections.", id="connection-summary", markup=False)
        yield self._summary

    async def on_mount(self) -> None:
        self._unsubscribe = self._registry.subscribe(self._handle_registry_update)

    def on_unmount(self) -> None:
        if self._unsubscribe:
            self._unsubscribe()
            self._unsubscribe = None

    def _handle_registry_update(self, state: RegistryState) -> None:
        if self._list is None:
            return
        previous = self._current.id if self._current else None
        self._list.clear()
        self._list.extend(_ConnectionListItem(connection) for connection in state.connections)
        self._current = None
        target = 0
        for index, connection in enumerate(state.connections):
            if connection.id == previous:
                target = index
                break
        if state.connections:
            self.call_after_refresh(self._highlight, target)
        else:
            self._show(None)

    def _highlight(self, index: int) -> None:
        if self._list is None:
            return
        self._list.index = index
        item = self._list.highlighted_child
        if isinstance(item, _ConnectionListItem):
            self._show(item.connection)

    @on(ListView.Highlighted, "#connection-list")
    def _handle_highlighted(self, event: ListView.Highlighted) -> None:
        item = event.item
        if isinstance(item, _ConnectionListItem):
            self._show(item.connection)

    @on(ListView.Selected, "#connection-list")
    def _handle_selected(self, event: ListView.Selected) -> None:
        item = event.item
        if isinstance(item, _ConnectionListItem):
            self._show(item.connection)
            if self._action_menu:
                self._action_menu.focus_first()
            event.stop()

    @on(_ActionChosen)
    def _handle_action_chosen(self, event: _ActionChosen) -> None:
        if self._current is None:
            return
        self.post_message(self.ActionRequested(self._current.id, event.action))
        event.stop()

    def action_focus_actions(self) -> None:
        if self._action_menu:
            self._action_menu.focus_first()

    def on_key(self, event: events.Key) -> None:
        if event.key == "escape" and self._list is not None:
            self._list.focus()
            event.stop()

    def _show(self, connection: Connection | None) -> None:
        if connection is not None and connection == self._current:
            return
        self._current = connection
        if self._action_menu:
            self._action_menu.show_for(connection)
        if self._summary:
            self._summary.update(self._summary_text(connection))
        if connection is not None:
            self.post_message(self.ConnectionSelected(connection))

    def _summary_text(self, connection: Connection | None) -> str:
        state = self._registry.state
        if connection is None:
            return "No connections." if not state or not state.connections else ""
        kind = connection.id.type or "Connection"
        last_used = describe_last_used(connection.last_used, self._last_used_unit)
        return "\n".join(
            [
                f"{kind} · {connection.host}",
                f"Last used: {last_used}",
                f"Actions: {len(connection.actions)}",
            ]
        )


class _ConnectionListItem(ListItem):
    """List item holding the connection it renders."""

    def __init__(self, connection: Connection) -> None:
        label = connection_label(connection)
        text = label if label == connection.host else f"{label}\n  {connection.host}"
        super().__init__(Label(text, markup=False))
        self.connection = connection


class _ActionMenu(Container):
    """Inline list of the highlighted connection's actions, in backend order."""

    DEFAULT_CSS = """
    #connection-actions {
        height: auto;
        border: round $surface-darken-1;
        padding: 0 1;
        margin-bottom: 1;
    }

    #connection-actions .menu-title {
        text-style: bold;
    }

    #connection-actions Button {
        width: 1fr;
        margin-top: 1;
    }
    """

    def __init__(self) -> None:
        super().__init__(id="connection-actions")
        self._title = Label("", classes="menu-title", markup=False)
        self._buttons = Vertical(id="connection-action-buttons")
        self._buttons.styles.height = "auto"
        self.display = False

    def compose(self) -> ComposeResult:
        yield self._title
        yield self._buttons

    def show_for(self, connection: Connection | None) -> None:
        self._buttons.remove_children()
        if connection is None:
            self.display = False
            return
        if connection.actions:
            self._title.update(f"Actions for {connection_label(connection)}")
            self._buttons.mount_all([_ActionButton(action) for action in connection.actions])
        else:
            self._title.update(f"No actions for {connection_label(connection)}")
        self.display = True

    def focus_first(self) -> None:
        buttons = list(self._buttons.query(_ActionButton))
        if buttons:
            buttons[0].focus()

    @on(Button.Pressed)
    def _handle_pressed(self, event: Button.Pressed) -> None:
        button = event.button
        if isinstance(button, _ActionButton):
            self.post_message(_ActionChosen(button.connection_action))
            event.stop()


class _ActionButton(Button):
    """Button bound to a single connection action."""

    def __init__(self, action: ConnectionAction) -> None:
        super().__init__(Content(action_label(action)), flat=True, compact=True)
        self.connection_action = action


__all__ = ["ConnectionsPane"]
