"""Command palette providers for core app features."""

from __future__ import annotations

from textual.command import DiscoveryHit, Hit, Hits, Provider
from textual.types import IgnoreReturnCallbackType

from .formatting import action_label, connection_label
from .models import ConnectionId
from .registry import ConnectionRegistry


def _registry_for(provider: Provider) -> ConnectionRegistry | None:
    registry = getattr(provider.app, "registry", None)
    if isinstance(registry, ConnectionRegistry):
        return registry
    return None


class ConnectionActionProvider(Provider):
    """Expose every connection action to the command palette."""

    async def search(self, query: str) -> Hits:
        registry = _registry_for(self)
        if registry is None:
            return
        matcher = self.matcher(query)
        for text, connection_id, name in self._entries(registry):
            match = matcher.match(text)
            if match > 0:
                yield Hit(
                    score=match,
                    match_display=matcher.highlight(text),
                    command=self._build_callback(connection_id, name),
                    help=f"Request '{name}' for {connection_id.host}.",
                )

    async def discover(self) -> Hits:
        registry = _registry_for(self)
        if registry is None:
            return
        for text, connection_id, name in self._entries(registry):
            yield DiscoveryHit(
                display=text,
                command=self._build_callback(connection_id, name),
                help=f"Request '{name}' for {connection_id.host}.",
            )

    @staticmethod
    def _entries(registry: ConnectionRegistry) -> list[tuple[str, ConnectionId, str]]:
        entries: list[tuple[str, ConnectionId, str]] = []
        for connection in registry.connections:
            for action in connection.actions:
                if not action.name:
                    continue
                entries.append(
                    (f"{action_label(action)}: {connection_label(connection)}", connection.id, action.name)
                )
        return entries

    def _build_callback(self, connection_id: ConnectionId, name: str) -> IgnoreReturnCallbackType:
        async def _run() -> None:
            requester = getattr(self.app, "request_action", None)
            if requester is None:
                return
            requester(connection_id, name)

        return _run


class ConnectionsRefreshProvider(Provider):
    """Expose a refresh action for the connection list."""

    _LABEL = "Refresh connections"

    async def search(self, query: str) -> Hits:
        if _registry_for(self) is None:
            return
        matcher = self.matcher(query)
        score = matcher.match(self._LABEL)
        if score > 0:
            yield Hit(
                score=score,
                match_display=matcher.highlight(self._LABEL),
                command=self._build_callback(),
                help="Trigger Ctrl+R equivalent refresh.",
            )

    async def discover(self) -> Hits:
        if _registry_for(self) is None:
            return
        yield DiscoveryHit(
            display=self._LABEL,
            command=self._build_callback(),
            help="Trigger Ctrl+R equivalent refresh.",
        )

    def _build_callback(self) -> IgnoreReturnCallbackType:
        async def _run() -> None:
            refresher = getattr(self.app, "action_refresh", None)
            if refresher is None:
                return
            refresher()

        return _run


__all__ = ["ConnectionActionProvider", "ConnectionsRefreshProvider"]
