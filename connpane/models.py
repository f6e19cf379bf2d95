"""Value types describing connections shown in the Connections pane."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping


def _empty_mapping() -> Mapping[str, Any]:
    return MappingProxyType({})


@dataclass(frozen=True, slots=True)
class ConnectionId:
    """Composite identity of a connection as reported by the backend."""

    host: str
    type: str | None = None
    extra: Mapping[str, Any] = field(default_factory=_empty_mapping, hash=False)


@dataclass(frozen=True, slots=True)
class ConnectionAction:
    """Operation the backend offers for a connection (opaque to this package)."""

    name: str | None = None
    icon_data: str | None = None
    extra: Mapping[str, Any] = field(default_factory=_empty_mapping, hash=False)


@dataclass(frozen=True, slots=True)
class Connection:
    """Immutable snapshot of one connection's metadata.

    Instances come from :func:`connpane.payloads.parse_connection`; any change
    reported by the backend produces a new instance instead of mutating this
    one. ``last_used`` is the raw backend timestamp, no unit conversion is
    applied.
    """

    id: ConnectionId
    display_name: str | None = None
    connect_code: str | None = None
    actions: tuple[ConnectionAction, ...] = ()
    last_used: float | None = None
    icon_data: str | None = None

    @property
    def host(self) -> str:
        """Host portion of the connection id."""

        return self.id.host


__all__ = ["Connection", "ConnectionAction", "ConnectionId"]
