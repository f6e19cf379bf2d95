"""Details view for the highlighted connection."""

from __future__ import annotations

from textual.widgets import Static

from connpane.formatting import action_label, connection_label, describe_last_used
from connpane.models import Connection


class ConnectionDetails(Static):
    """Shows identity, recency and connect code of one connection."""

    DEFAULT_CSS = """
    ConnectionDetails {
        padding: 1 2;
        height: 1fr;
    }
    """

    def __init__(self, *, last_used_unit: str = "seconds") -> None:
        super().__init__("Select a connection.", id="connection-details", markup=False)
        self._last_used_unit = last_used_unit
        self._connection: Connection | None = None

    @property
    def connection(self) -> Connection | None:
        return self._connection

    def show(self, connection: Connection | None) -> None:
        self._connection = connection
        self.update(self.render_text())

    def render_text(self) -> str:
        connection = self._connection
        if connection is None:
            return "Select a connection."
        actions = ", ".join(action_label(action) for action in connection.actions) or "none"
        lines = [
            connection_label(connection),
            "",
            f"Host: {connection.host}",
            f"Type: {connection.id.type or 'unknown'}",
            f"Last used: {describe_last_used(connection.last_used, self._last_used_unit)}",
            f"Actions: {actions}",
            "",
            "Connect code:",
            connection.connect_code or "(none)",
        ]
        return "\n".join(lines)


__all__ = ["ConnectionDetails"]
