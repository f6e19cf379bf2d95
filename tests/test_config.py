"""Tests for AppConfig helpers."""

from __future__ import annotations

from pathlib import Path

import pytest

from connpane import config as config_module
from connpane.config import AppConfig, LayoutState, load_config, save_config


def test_load_config_returns_defaults_when_missing(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(config_module, "CONFIG_FILE", tmp_path / "config.toml")

    result = load_config()

    assert result == AppConfig()
    assert result.sort_order == "recent"
    assert result.last_used_unit == "seconds"


def test_load_config_reads_values(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    config_path = tmp_path / "config.toml"
    config_path.write_text(
        """
theme = "light"
source_file = "~/.local/share/ide/connections.json"
skip_malformed = true
sort_order = "name"
last_used_unit = "milliseconds"

[layout]
pane_width = 40
"""
    )
    monkeypatch.setattr(config_module, "CONFIG_FILE", config_path)

    result = load_config()

    assert result.theme == "light"
    assert result.source_file == "~/.local/share/ide/connections.json"
    assert result.skip_malformed is True
    assert result.sort_order == "name"
    assert result.last_used_unit == "milliseconds"
    assert result.layout.pane_width == 40


def test_load_config_ignores_unknown_enum_values(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    config_path = tmp_path / "config.toml"
    config_path.write_text('sort_order = "random"\nlast_used_unit = "fortnights"\n')
    monkeypatch.setattr(config_module, "CONFIG_FILE", config_path)

    result = load_config()

    assert result.sort_order == "recent"
    assert result.last_used_unit == "seconds"


def test_load_config_handles_toml_errors(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    config_path = tmp_path / "config.toml"
    config_path.write_text("theme = [unterminated")
    monkeypatch.setattr(config_module, "CONFIG_FILE", config_path)

    result = load_config()

    assert result == AppConfig()


def test_save_config_round_trips(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    config_path = tmp_path / "nested" / "config.toml"
    monkeypatch.setattr(config_module, "CONFIG_FILE", config_path)
    original = AppConfig(
        theme="light",
        source_file='C:\\Users\\me\\"conns".json',
        sort_order="name",
        last_used_unit="milliseconds",
        layout=LayoutState(pane_width=32),
    )

    save_config(original)

    content = config_path.read_text()
    assert 'sort_order = "name"' in content
    assert "[layout]" in content
    assert "pane_width = 32" in content
    assert load_config() == original


def test_with_sort_order_returns_copy() -> None:
    config = AppConfig()

    updated = config.with_sort_order("name")

    assert updated.sort_order == "name"
    assert config.sort_order == "recent"


def test_with_layout_updates_state() -> None:
    config = AppConfig()

    updated = config.with_layout(pane_width=40)

    assert updated.layout.pane_width == 40


def test_save_config_escapes_theme(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(config_module, "CONFIG_FILE", tmp_path / "config.toml")
    original = AppConfig(theme='solarized "dark"')

    save_config(original)

    assert load_config() == original
