"""Shared test fixtures."""

from __future__ import annotations

import sqlite3
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from illinihunt.config import IlliniHuntConfig
from illinihunt.db import connect

NOW = datetime(2025, 3, 15, 12, 0, tzinfo=timezone.utc)


def hoursAgo(hours: float, now: datetime = NOW) -> str:
    """ISO-8601 timestamp `hours` before now."""
    return (now - timedelta(hours=hours)).isoformat()


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def tmp_db_path(tmp_path: Path) -> str:
    return str(tmp_path / "test_illinihunt.db")


@pytest.fixture
def config(tmp_db_path: str) -> IlliniHuntConfig:
    return IlliniHuntConfig(db_path=tmp_db_path)


@pytest.fixture
def db(config: IlliniHuntConfig) -> sqlite3.Connection:
    conn = connect(config)
    yield conn
    conn.close()
