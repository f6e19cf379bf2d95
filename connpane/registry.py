"""Registry holding the current connection snapshot for the UI."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Callable

from .formatting import connection_label
from .models import Connection, ConnectionId
from .sources import ConnectionSource, ConnectionSourceError

LOG = logging.getLogger(__name__)

RegistryListener = Callable[["RegistryState"], None]


class SortOrder(str, Enum):
    """Display orderings supported by the Connections pane."""

    RECENT = "recent"
    NAME = "name"


@dataclass(frozen=True, slots=True)
class RegistryState:
    """Point-in-time view of the known connections."""

    connections: tuple[Connection, ...]
    refreshed_at: datetime
    source_label: str
    sort_order: SortOrder = SortOrder.RECENT
    using_fallback: bool = False
    last_error: str | None = None


def sort_connections(connections: tuple[Connection, ...], order: SortOrder) -> tuple[Connection, ...]:
    """Return ``connections`` ordered for display."""

    if order is SortOrder.NAME:
        return tuple(sorted(connections, key=lambda conn: connection_label(conn).casefold()))
    # most recent first, records without a usable timestamp last
    return tuple(
        sorted(
            connections,
            key=lambda conn: (
                not _has_timestamp(conn),
                -conn.last_used if _has_timestamp(conn) else 0.0,
                connection_label(conn).casefold(),
            ),
        )
    )


def _has_timestamp(connection: Connection) -> bool:
    return connection.last_used is not None and math.isfinite(connection.last_used)


class ConnectionRegistry:
    """Keeps the latest connections reported by a source.

    Records are never modified in place: refreshes swap the whole snapshot and
    :meth:`replace` swaps a single record that shares the same id.
    """

    def __init__(
        self,
        source: ConnectionSource,
        *,
        fallback_source: ConnectionSource | None = None,
        sort_order: SortOrder = SortOrder.RECENT,
    ) -> None:
        self._source = source
        self._fallback_source = fallback_source
        self._sort_order = sort_order
        self._connections: tuple[Connection, ...] = ()
        self._listeners: set[RegistryListener] = set()
        self._state: RegistryState | None = None
        self._using_fallback = False
        self._last_error: str | None = None

    @property
    def state(self) -> RegistryState | None:
        """Latest registry state, ``None`` before the first refresh."""

        return self._state

    @property
    def connections(self) -> tuple[Connection, ...]:
        """Known connections in display order."""

        return sort_connections(self._connections, self._sort_order)

    @property
    def sort_order(self) -> SortOrder:
        return self._sort_order

    @property
    def source_label(self) -> str:
        if self._using_fallback and self._fallback_source is not None:
            return self._fallback_source.label
        return self._source.label

    def refresh(self) -> RegistryState:
        """Fetch a fresh snapshot from the source, falling back on failure."""

        try:
            connections = self._source.fetch()
        except ConnectionSourceError as exc:
            if self._fallback_source is None:
                raise
            LOG.warning(
                "Connection source failed, using fallback",
                extra={"source": self._source.label, "error": str(exc)},
            )
            connections = self._fallback_source.fetch()
            self._using_fallback = True
            self._last_error = str(exc)
        else:
            self._using_fallback = False
            self._last_error = None
        self._connections = tuple(connections)
        return self._publish()

    def get(self, connection_id: ConnectionId) -> Connection | None:
        """Return the record with ``connection_id`` if known."""

        for connection in self._connections:
            if connection.id == connection_id:
                return connection
        return None

    def require(self, connection_id: ConnectionId) -> Connection:
        connection = self.get(connection_id)
        if connection is None:
            raise ValueError(f"Connection '{connection_id.host}' not found.")
        return connection

    def replace(self, connection: Connection) -> RegistryState:
        """Swap in a new record for its id, appending it when the id is new."""

        updated: list[Connection] = []
        found = False
        for existing in self._connections:
            if existing.id == connection.id:
                updated.append(connection)
                found = True
            else:
                updated.append(existing)
        if not found:
            updated.append(connection)
        self._connections = tuple(updated)
        return self._publish()

    def remove(self, connection_id: ConnectionId) -> bool:
        """Drop the record for ``connection_id``; returns ``False`` if unknown."""

        remaining = tuple(conn for conn in self._connections if conn.id != connection_id)
        if len(remaining) == len(self._connections):
            return False
        self._connections = remaining
        self._publish()
        return True

    def set_sort_order(self, order: SortOrder) -> RegistryState | None:
        self._sort_order = order
        if self._state is None:
            return None
        return self._publish(refreshed_at=self._state.refreshed_at)

    def subscribe(self, listener: RegistryListener) -> Callable[[], None]:
        """Subscribe to registry updates; returns an unsubscribe handle."""

        self._listeners.add(listener)
        if self._state:
            listener(self._state)

        def _unsubscribe() -> None:
            self._listeners.discard(listener)

        return _unsubscribe

    def _publish(self, *, refreshed_at: datetime | None = None) -> RegistryState:
        self._state = RegistryState(
            connections=self.connections,
            refreshed_at=refreshed_at or datetime.now(tz=timezone.utc),
            source_label=self.source_label,
            sort_order=self._sort_order,
            using_fallback=self._using_fallback,
            last_error=self._last_error,
        )
        self._notify(self._state)
        return self._state

    def _notify(self, state: RegistryState) -> None:
        for listener in tuple(self._listeners):
            try:
                listener(state)
            except Exception:
                LOG.exception("Registry listener failed")


__all__ = [
    "ConnectionRegistry",
    "RegistryListener",
    "RegistryState",
    "SortOrder",
    "sort_connections",
]
