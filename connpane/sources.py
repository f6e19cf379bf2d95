"""Sources that produce connection snapshots for the registry."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Mapping, Protocol, Sequence, runtime_checkable

from .models import Connection
from .payloads import MalformedRecordError, parse_connections

LOG = logging.getLogger(__name__)


class ConnectionSourceError(RuntimeError):
    """Raised when a source cannot produce a connection snapshot."""


@runtime_checkable
class ConnectionSource(Protocol):
    """Protocol implemented by connection sources."""

    label: str

    def fetch(self) -> tuple[Connection, ...]:
        """Return the current list of connections reported by the backend."""


class JsonFileConnectionSource:
    """Reads the snapshot file the backend process writes for the pane.

    The document is either a list of connection payloads or an object holding
    that list under ``connections``.
    """

    def __init__(self, path: Path | str, *, skip_malformed: bool = False) -> None:
        self._path = Path(path).expanduser()
        self._skip_malformed = skip_malformed
        self.label = f"Snapshot file ({self._path.name})"

    @property
    def path(self) -> Path:
        return self._path

    def fetch(self) -> tuple[Connection, ...]:
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except FileNotFoundError as exc:
            raise ConnectionSourceError(f"Snapshot file not found: {self._path}") from exc
        except (OSError, UnicodeDecodeError) as exc:
            raise ConnectionSourceError(f"Failed to read snapshot file {self._path}: {exc}") from exc
        except json.JSONDecodeError as exc:
            raise ConnectionSourceError(f"Snapshot file {self._path} is not valid JSON: {exc}") from exc
        payloads = self._payloads_from(raw)
        try:
            connections = parse_connections(payloads, skip_malformed=self._skip_malformed)
        except MalformedRecordError as exc:
            raise ConnectionSourceError(f"Snapshot file {self._path} holds a malformed connection: {exc}") from exc
        LOG.debug("Loaded connection snapshot", extra={"path": str(self._path), "count": len(connections)})
        return connections

    def _payloads_from(self, raw: Any) -> Sequence[Any]:
        if isinstance(raw, Mapping):
            raw = raw.get("connections", [])
        if not isinstance(raw, list):
            raise ConnectionSourceError(
                f"Snapshot file {self._path} must contain a list of connections."
            )
        return raw


DEMO_CONNECTION_PRESETS: Sequence[Sequence[Mapping[str, Any]]] = (
    (
        {
            "id": {"type": "PostgreSQL", "host": "db1.example.com"},
            "display_name": "Prod DB",
            "connect_code": 'engine = create_engine("postgresql://db1.example.com/prod")',
            "actions": [
                {"name": "Disconnect"},
                {"name": "View data"},
            ],
            "last_used": 1700000000.0,
            "icon_data": "data:image/png;base64,iVBORw0KGgo=",
        },
        {
            "id": {"type": "SQLite", "host": "analytics.sqlite"},
            "display_name": "Local analytics",
            "connect_code": 'engine = create_engine("sqlite:///analytics.sqlite")',
            "actions": [{"name": "Disconnect"}],
            "last_used": 1699990000.0,
            "icon_data": "",
        },
    ),
    (
        {
            "id": {"type": "PostgreSQL", "host": "db1.example.com"},
            "display_name": "Prod DB",
            "connect_code": 'engine = create_engine("postgresql://db1.example.com/prod")',
            "actions": [
                {"name": "Disconnect"},
                {"name": "View data"},
            ],
            "last_used": 1700000600.0,
            "icon_data": "data:image/png;base64,iVBORw0KGgo=",
        },
        {
            "id": {"type": "ODBC", "host": "warehouse.internal"},
            "display_name": "Warehouse (ODBC)",
            "connect_code": 'conn = pyodbc.connect("DSN=warehouse")',
            "actions": [
                {"name": "Disconnect"},
                {"name": "Preview tables"},
                {"name": "Help"},
            ],
            "last_used": 1700000300.0,
            "icon_data": "",
        },
    ),
)


class DemoConnectionSource:
    """Stub source that cycles through preset connection snapshots."""

    label = "Demo connections"

    def __init__(self, presets: Sequence[Sequence[Mapping[str, Any]]] | None = None) -> None:
        sources = presets if presets is not None else DEMO_CONNECTION_PRESETS
        self._snapshots: tuple[tuple[Connection, ...], ...] = tuple(
            parse_connections(snapshot) for snapshot in sources
        )
        self._cursor = 0
        self._fetched = False

    def fetch(self) -> tuple[Connection, ...]:
        """Return the next snapshot; the first call returns the first preset."""

        if not self._snapshots:
            return ()
        if self._fetched and len(self._snapshots) > 1:
            self._cursor = (self._cursor + 1) % len(self._snapshots)
        self._fetched = True
        return self._snapshots[self._cursor]


__all__ = [
    "ConnectionSource",
    "ConnectionSourceError",
    "DEMO_CONNECTION_PRESETS",
    "DemoConnectionSource",
    "JsonFileConnectionSource",
]
