"""Display helpers for connection records."""

from __future__ import annotations

from datetime import datetime, timezone

from .models import Connection, ConnectionAction

_UNIT_DIVISORS = {"seconds": 1.0, "milliseconds": 1000.0}


def last_used_datetime(value: float | None, unit: str = "seconds") -> datetime | None:
    """Interpret a raw ``last_used`` value as an aware UTC datetime."""

    if value is None:
        return None
    try:
        divisor = _UNIT_DIVISORS[unit]
    except KeyError:
        raise ValueError(f"Unknown timestamp unit '{unit}'.") from None
    try:
        return datetime.fromtimestamp(value / divisor, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None


def describe_last_used(
    value: float | None,
    unit: str = "seconds",
    *,
    now: datetime | None = None,
) -> str:
    """Short relative description used by the pane and details view."""

    moment = last_used_datetime(value, unit)
    if moment is None:
        return "never"
    current = now or datetime.now(tz=timezone.utc)
    elapsed = (current - moment).total_seconds()
    if elapsed < 60:
        return "just now"
    if elapsed < 3600:
        return f"{int(elapsed // 60)} min ago"
    if elapsed < 86400:
        return f"{int(elapsed // 3600)} h ago"
    return moment.astimezone().strftime("%Y-%m-%d")


def connection_label(connection: Connection) -> str:
    return connection.display_name or connection.host


def action_label(action: ConnectionAction) -> str:
    return action.name or "(unnamed action)"


__all__ = ["action_label", "connection_label", "describe_last_used", "last_used_datetime"]
