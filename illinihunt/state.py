"""Application state container: singleton shared by the HTTP API and CLI."""

from __future__ import annotations

import logging
import sqlite3
from dataclasses import dataclass

from illinihunt.config import IlliniHuntConfig, loadConfig
from illinihunt.db import connect

logger = logging.getLogger("illinihunt")

# ── Singleton ────────────────────────────────────────────────

_state: AppState | None = None


@dataclass(frozen=True)
class AppState:
    db: sqlite3.Connection
    config: IlliniHuntConfig


def getState() -> AppState:
    """Return current state or raise if not initialised."""
    assert _state is not None, "AppState not initialized, call initState() first"
    return _state


def isInitialized() -> bool:
    return _state is not None


def initState(config: IlliniHuntConfig | None = None) -> AppState:
    """Create + store singleton. HTTP uses threads so check_same_thread=False."""
    global _state
    _state = createAppState(config=config, check_same_thread=False)
    return _state


def closeState() -> None:
    """Close DB and clear global."""
    global _state
    if _state and _state.db:
        _state.db.close()
    _state = None
    logger.info("IlliniHunt shut down.")


def setState(s: AppState | None) -> None:
    """Inject state directly (for tests)."""
    global _state
    _state = s


def createAppState(
    config: IlliniHuntConfig | None = None,
    check_same_thread: bool = True,
) -> AppState:
    """Load config and open the DB."""
    cfg = config or loadConfig()
    db = connect(cfg, check_same_thread=check_same_thread)
    logger.info("IlliniHunt starting, db: %s", cfg.db_path)
    return AppState(db=db, config=cfg)
