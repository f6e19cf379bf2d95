"""Deserialization boundary turning backend payloads into connection records."""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Any, Iterable, Mapping

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .models import Connection, ConnectionAction, ConnectionId

LOG = logging.getLogger(__name__)


class MalformedRecordError(ValueError):
    """Raised when a payload lacks the structure a connection record needs."""

    def __init__(self, message: str, fields: tuple[str, ...] = ()) -> None:
        super().__init__(message)
        self.fields = fields


class ConnectionIdPayload(BaseModel):
    """Wire shape of a connection id; unknown keys are kept."""

    model_config = ConfigDict(extra="allow", frozen=True, strict=True)

    host: str
    type: str | None = None


class ConnectionActionPayload(BaseModel):
    """Wire shape of a single connection action."""

    model_config = ConfigDict(extra="allow", frozen=True, strict=True)

    name: str | None = None
    icon_data: str | None = None


class ConnectionPayload(BaseModel):
    """Wire shape of a connection record (snake_case, as sent by the backend).

    Validation is strict: wrong-typed values are rejected rather than coerced
    (ints still count as floats) and non-finite timestamps are refused.
    """

    model_config = ConfigDict(extra="ignore", frozen=True, strict=True, allow_inf_nan=False)

    id: ConnectionIdPayload
    display_name: str | None = None
    connect_code: str | None = None
    actions: list[ConnectionActionPayload] = Field(default_factory=list)
    last_used: float | None = None
    icon_data: str | None = None


def parse_connection(payload: Mapping[str, Any]) -> Connection:
    """Validate a single payload and wrap it in a :class:`Connection`."""

    if not isinstance(payload, Mapping):
        raise MalformedRecordError(
            f"Connection payload must be an object, got {type(payload).__name__}."
        )
    payload = dict(payload)
    # null actions are treated like an absent field
    if "actions" in payload and payload["actions"] is None:
        del payload["actions"]
    try:
        parsed = ConnectionPayload.model_validate(payload)
    except ValidationError as exc:
        fields = tuple(
            ".".join(str(part) for part in error["loc"]) for error in exc.errors()
        )
        raise MalformedRecordError(
            f"Malformed connection payload ({', '.join(fields)}): {exc.error_count()} error(s).",
            fields,
        ) from exc
    return _to_connection(parsed)


def parse_connections(
    payloads: Iterable[Mapping[str, Any]],
    *,
    skip_malformed: bool = False,
) -> tuple[Connection, ...]:
    """Parse a list of payloads in order.

    Fails on the first malformed entry unless ``skip_malformed`` is set, in
    which case bad entries are logged and dropped.
    """

    connections: list[Connection] = []
    for index, payload in enumerate(payloads):
        try:
            connections.append(parse_connection(payload))
        except MalformedRecordError as exc:
            if not skip_malformed:
                raise
            LOG.warning(
                "Skipping malformed connection payload",
                extra={"index": index, "fields": exc.fields},
            )
    return tuple(connections)


def _to_connection(parsed: ConnectionPayload) -> Connection:
    return Connection(
        id=ConnectionId(
            host=parsed.id.host,
            type=parsed.id.type,
            extra=_frozen_extra(parsed.id),
        ),
        display_name=parsed.display_name,
        connect_code=parsed.connect_code,
        actions=tuple(
            ConnectionAction(
                name=action.name,
                icon_data=action.icon_data,
                extra=_frozen_extra(action),
            )
            for action in parsed.actions
        ),
        last_used=parsed.last_used,
        icon_data=parsed.icon_data,
    )


def _frozen_extra(model: BaseModel) -> Mapping[str, Any]:
    return MappingProxyType(dict(model.model_extra or {}))


__all__ = [
    "ConnectionActionPayload",
    "ConnectionIdPayload",
    "ConnectionPayload",
    "MalformedRecordError",
    "parse_connection",
    "parse_connections",
]
