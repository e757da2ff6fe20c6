"""CLI command tests: non-interactive paths via typer.testing.CliRunner."""

from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone
from pathlib import Path
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from illinihunt.config import IlliniHuntConfig
from illinihunt.db import addVote, connect, insertProject
from illinihunt.server.cli import _cli

runner = CliRunner()


@pytest.fixture(autouse=True)
def cfg_dir(tmp_path: Path):
    """Redirect CONFIG_DIR / CONFIG_PATH to tmp_path for every test."""
    cfg_dir = tmp_path / ".illinihunt"
    cfg_dir.mkdir()
    cfg_path = cfg_dir / "config.json"
    with (
        patch("illinihunt.config.CONFIG_DIR", cfg_dir),
        patch("illinihunt.config.CONFIG_PATH", cfg_path),
    ):
        yield cfg_dir


@pytest.fixture
def seeded(cfg_dir: Path):
    """Projects in the DB the CLI will open, timestamped against the real clock."""
    db = connect(IlliniHuntConfig(db_path=str(cfg_dir / "illinihunt.db")))
    now = datetime.now(timezone.utc)
    ago = lambda **kw: (now - timedelta(**kw)).isoformat()  # noqa: E731
    quiet = insertProject(db, "Quiet", "few votes", "d", "u1", created_at=ago(hours=2))
    loud = insertProject(db, "Loud", "many votes", "d", "u2", created_at=ago(hours=2))
    insertProject(db, "Ancient", "old", "d", "u3", created_at=ago(days=40))
    addVote(db, "v1", quiet)
    for i in range(4):
        addVote(db, f"v{i}", loud)
    db.close()


# ── trending ─────────────────────────────────────────────────


def test_trending_json(seeded):
    result = runner.invoke(_cli, ["trending", "--period", "month", "--format", "json"])
    assert result.exit_code == 0
    data = json.loads(result.output)
    assert data["label"] == "This Month"
    assert [r["project"]["name"] for r in data["results"]] == ["Loud", "Quiet"]


def test_trending_human(seeded):
    result = runner.invoke(_cli, ["trending", "-p", "all", "-n", "2"])
    assert result.exit_code == 0
    assert "All Time" in result.output
    assert "Loud" in result.output
    assert "Ancient" not in result.output


def test_trending_empty():
    result = runner.invoke(_cli, ["trending", "--period", "today"])
    assert result.exit_code == 0
    assert "No trending projects" in result.output


def test_trending_badPeriod():
    result = runner.invoke(_cli, ["trending", "--period", "fortnight"])
    assert result.exit_code != 0


def test_trending_badFormat():
    result = runner.invoke(_cli, ["trending", "--format", "xml"])
    assert result.exit_code != 0


def test_featured_json(seeded):
    result = runner.invoke(_cli, ["featured", "-n", "1", "--format", "json"])
    assert result.exit_code == 0
    data = json.loads(result.output)
    assert data["pool_size"] == 3
    assert [r["project"]["name"] for r in data["results"]] == ["Loud"]


# ── periods ──────────────────────────────────────────────────


def test_periods_json():
    result = runner.invoke(_cli, ["periods", "--format", "json"])
    assert result.exit_code == 0
    data = json.loads(result.output)
    assert [p["value"] for p in data] == ["today", "week", "month", "all"]


def test_periods_human():
    result = runner.invoke(_cli, ["periods"])
    assert result.exit_code == 0
    assert "This Week" in result.output


# ── config ───────────────────────────────────────────────────


def test_configList_json():
    result = runner.invoke(_cli, ["config", "list", "--format", "json"])
    assert result.exit_code == 0
    data = json.loads(result.output)
    assert data["trending"]["default_period"] == "week"
    assert data["trending"]["candidate_limit"] == 50
    assert "db_path" in data


def test_configList_human():
    result = runner.invoke(_cli, ["config", "list"])
    assert result.exit_code == 0
    assert "Trending" in result.output


def test_configGet_json():
    result = runner.invoke(_cli, ["config", "get", "trending.default_limit", "--format", "json"])
    assert result.exit_code == 0
    data = json.loads(result.output)
    assert data == {"key": "trending.default_limit", "value": 30, "type": "int"}


def test_configGet_missing_json():
    result = runner.invoke(_cli, ["config", "get", "nonexistent.key", "--format", "json"])
    assert result.exit_code == 1
    data = json.loads(result.output)
    assert data["ok"] is False


def test_configSet_json(cfg_dir: Path):
    result = runner.invoke(
        _cli, ["config", "set", "trending.default_period", "today", "--format", "json"]
    )
    assert result.exit_code == 0
    assert json.loads(result.output) == {
        "ok": True, "key": "trending.default_period", "value": "today",
    }
    saved = json.loads((cfg_dir / "config.json").read_text())
    assert saved["trending"]["default_period"] == "today"


def test_configSet_invalidPeriod_json():
    result = runner.invoke(
        _cli, ["config", "set", "trending.default_period", "decade", "--format", "json"]
    )
    assert result.exit_code == 1
    assert json.loads(result.output)["ok"] is False


def test_configSet_invalidInt_json():
    result = runner.invoke(_cli, ["config", "set", "port", "high", "--format", "json"])
    assert result.exit_code == 1
    assert json.loads(result.output)["ok"] is False


def test_configGet_periodChoices_json():
    result = runner.invoke(_cli, ["config", "get", "trending.default_period", "--format", "json"])
    assert result.exit_code == 0
    data = json.loads(result.output)
    assert data == {
        "key": "trending.default_period", "value": "week", "type": "today|week|month|all",
    }


def test_configSet_unknownKey_json(cfg_dir: Path):
    result = runner.invoke(_cli, ["config", "set", "trending.decay", "2", "--format", "json"])
    assert result.exit_code == 1
    assert json.loads(result.output)["ok"] is False
    assert not (cfg_dir / "config.json").exists()


def test_configSet_limitBelowOne_json():
    result = runner.invoke(
        _cli, ["config", "set", "trending.default_limit", "0", "--format", "json"]
    )
    assert result.exit_code == 1
    assert json.loads(result.output)["ok"] is False


def test_configSet_storesTypedValue(cfg_dir: Path):
    result = runner.invoke(_cli, ["config", "set", "port", "9000", "--format", "json"])
    assert result.exit_code == 0
    assert json.loads(result.output)["value"] == 9000
    saved = json.loads((cfg_dir / "config.json").read_text())
    assert saved["port"] == 9000

    result = runner.invoke(_cli, ["config", "get", "port", "--format", "json"])
    assert json.loads(result.output) == {"key": "port", "value": 9000, "type": "int"}
