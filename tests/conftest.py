from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Any, Dict, List, Tuple

import pytest


def pytest_configure():
    # Ensure project root is on sys.path for absolute imports like 'pipelines.steps.parse_entries'
    root = Path(__file__).resolve().parents[1]
    if str(root) not in sys.path:
        sys.path.insert(0, str(root))
    # Never hit real webhooks from tests
    os.environ["LEAD_WEBHOOK_URL"] = ""
    os.environ["COMPANY_WEBHOOK_URL"] = ""


@pytest.fixture(autouse=True)
def _fresh_settings():
    from config.settings import get_settings

    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def conn(tmp_path):
    from db import schema
    from db.connection import get_connection

    connection = get_connection(str(tmp_path / "t.db"))
    schema.bootstrap(connection)
    try:
        yield connection
    finally:
        connection.close()


class RecordingSink:
    """In-memory notification sink."""

    def __init__(self) -> None:
        self.sent: List[Tuple[str, Dict[str, Any]]] = []

    def send(self, channel, payload):
        self.sent.append((channel, payload))

    def payloads(self, channel: str) -> List[Dict[str, Any]]:
        return [p for c, p in self.sent if c == channel]


@pytest.fixture
def sink():
    return RecordingSink()


class StaticChecker:
    """Reachability checker with a fixed answer per URL (default: reachable)."""

    def __init__(self, unreachable=()) -> None:
        self.unreachable = set(unreachable)
        self.calls: List[str] = []

    def is_reachable(self, url: str) -> bool:
        self.calls.append(url)
        return url not in self.unreachable


@pytest.fixture
def checker():
    return StaticChecker()
