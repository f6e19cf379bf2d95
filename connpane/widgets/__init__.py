"""Widget library for the Textual UI."""

from __future__ import annotations

from .connection_details import ConnectionDetails
from .connections_pane import ConnectionsPane
from .status_bar import StatusBar

__all__ = ["ConnectionDetails", "ConnectionsPane", "StatusBar"]
