"""Shared fixtures for connpane tests."""

from __future__ import annotations

from typing import Any

import pytest


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def prod_payload() -> dict[str, Any]:
    return {
        "id": {"host": "db1.example.com"},
        "display_name": "Prod DB",
        "connect_code": "con <- dbConnect(...)",
        "actions": [{"name": "Disconnect"}],
        "last_used": 1700000000.0,
        "icon_data": "data:image/png;base64,...",
    }
