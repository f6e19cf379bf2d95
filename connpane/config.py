"""App configuration loading helpers."""

from __future__ import annotations

from pathlib import Path
from typing import Literal

import tomllib

from pydantic import BaseModel, Field, ValidationError

CONFIG_FILE = Path.home() / ".config" / "connpane" / "config.toml"

SortOrderName = Literal["recent", "name"]
TimestampUnit = Literal["seconds", "milliseconds"]


class LayoutState(BaseModel):
    """Persisted layout hints for the TUI."""

    pane_width: int | None = None


class AppConfig(BaseModel):
    """Shape of the application configuration file."""

    theme: str = "dark"
    source_file: str | None = None
    skip_malformed: bool = False
    sort_order: SortOrderName = "recent"
    last_used_unit: TimestampUnit = "seconds"
    layout: LayoutState = Field(default_factory=LayoutState)

    def with_sort_order(self, order: SortOrderName) -> AppConfig:
        """Return a copy with the sort order updated."""

        return self.model_copy(update={"sort_order": order})

    def with_layout(self, **updates: object) -> AppConfig:
        """Return a copy with layout state changes applied."""

        layout = self.layout.model_copy(update=updates)
        return self.model_copy(update={"layout": layout})


def load_config() -> AppConfig:
    """Load configuration from disk; fall back to defaults if missing."""

    try:
        data = _read_config_file()
    except FileNotFoundError:
        return AppConfig()
    except (tomllib.TOMLDecodeError, OSError):
        return AppConfig()
    try:
        return AppConfig(**data)
    except ValidationError:
        return AppConfig()


def save_config(config: AppConfig) -> None:
    """Persist configuration to disk."""

    CONFIG_FILE.parent.mkdir(parents=True, exist_ok=True)
    lines: list[str] = [
        f"theme = {_toml_string(config.theme)}",
        f'sort_order = "{config.sort_order}"',
        f'last_used_unit = "{config.last_used_unit}"',
        f"skip_malformed = {str(config.skip_malformed).lower()}",
    ]
    if config.source_file:
        lines.append(f"source_file = {_toml_string(config.source_file)}")
    if config.layout.pane_width is not None:
        lines.append("")
        lines.append("[layout]")
        lines.append(f"pane_width = {config.layout.pane_width}")
    CONFIG_FILE.write_text("\n".join(lines) + "\n")


def _toml_string(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def _read_config_file() -> dict[str, object]:
    with CONFIG_FILE.open("rb") as handle:
        raw = tomllib.load(handle)
    data: dict[str, object] = {}
    for key in ("theme", "source_file"):
        value = raw.get(key)
        if isinstance(value, str):
            data[key] = value
    skip_malformed = raw.get("skip_malformed")
    if isinstance(skip_malformed, bool):
        data["skip_malformed"] = skip_malformed
    sort_order = raw.get("sort_order")
    if sort_order in ("recent", "name"):
        data["sort_order"] = sort_order
    unit = raw.get("last_used_unit")
    if unit in ("seconds", "milliseconds"):
        data["last_used_unit"] = unit
    layout = raw.get("layout")
    if isinstance(layout, dict):
        state: dict[str, object] = {}
        pane_width = layout.get("pane_width")
        if isinstance(pane_width, int) and not isinstance(pane_width, bool):
            state["pane_width"] = pane_width
        data["layout"] = LayoutState(**state)
    return data
