"""Connections pane: typed snapshots of live data-source connections."""

from .models import Connection, ConnectionAction, ConnectionId
from .payloads import MalformedRecordError, parse_connection, parse_connections
from .registry import ConnectionRegistry, RegistryState, SortOrder
from .sources import ConnectionSource, ConnectionSourceError, DemoConnectionSource, JsonFileConnectionSource

__all__ = [
    "Connection",
    "ConnectionAction",
    "ConnectionId",
    "ConnectionRegistry",
    "ConnectionSource",
    "ConnectionSourceError",
    "DemoConnectionSource",
    "JsonFileConnectionSource",
    "MalformedRecordError",
    "RegistryState",
    "SortOrder",
    "parse_connection",
    "parse_connections",
]
