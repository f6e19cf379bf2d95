"""Status bar widget that mirrors registry information."""

from __future__ import annotations

from typing import Callable

from textual.widgets import Static

from connpane.registry import ConnectionRegistry, RegistryState


class StatusBar(Static):
    """Compact status strip rendered above Textual's footer."""

    DEFAULT_CSS = """
    StatusBar {
        height: 1;
        padding: 0 1;
        background: $surface-darken-3;
        color: $text;
    }
    """

    def __init__(self, registry: ConnectionRegistry) -> None:
        super().__init__("", id="status-bar", markup=False)
        self._registry = registry
        self._unsubscribe: Callable[[], None] | None = None

    async def on_mount(self) -> None:
        self._unsubscribe = self._registry.subscribe(self._handle_registry_update)

    def on_unmount(self) -> None:
        if self._unsubscribe:
            self._unsubscribe()
            self._unsubscribe = None

    @staticmethod
    def describe(state: RegistryState) -> str:
        refreshed = state.refreshed_at.astimezone().strftime("%H:%M:%S")
        parts = [
            f"Source: {state.source_label}",
            f"Connections: {len(state.connections)}",
            f"Sort: {state.sort_order.value}",
            f"Refreshed: {refreshed}",
        ]
        if state.last_error:
            reason = state.last_error.splitlines()[0][:80]
            parts.append(f"Error: {reason}")
        return " | ".join(parts)

    def _handle_registry_update(self, state: RegistryState) -> None:
        self.update(self.describe(state))


__all__ = ["StatusBar"]
