"""Config loading from ~/.illinihunt/config.json with env var overrides."""

from __future__ import annotations

import json
from pathlib import Path
from typing import ClassVar

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from illinihunt.ranking.featured import FEATURED_PROJECTS_COUNT, MIN_TRENDING_POOL_SIZE
from illinihunt.ranking.trending import TrendingPeriod

CONFIG_DIR = Path.home() / ".illinihunt"
CONFIG_PATH = CONFIG_DIR / "config.json"


class TrendingConfig(BaseModel):
    default_period: TrendingPeriod = TrendingPeriod.WEEK
    default_limit: int = Field(FEATURED_PROJECTS_COUNT, ge=1)
    # How many recent projects the trending listing pulls before ranking
    candidate_limit: int = Field(MIN_TRENDING_POOL_SIZE, ge=1)


class IlliniHuntConfig(BaseSettings):
    model_config: ClassVar[SettingsConfigDict] = SettingsConfigDict(
        env_prefix="ILLINIHUNT_",
        extra="ignore",
    )
    db_path: str = Field(default_factory=lambda: str(CONFIG_DIR / "illinihunt.db"))
    # HTTP server
    host: str = "127.0.0.1"
    port: int = 8787
    trending: TrendingConfig = Field(default_factory=TrendingConfig)


def loadConfig() -> IlliniHuntConfig:
    """Load config from ~/.illinihunt/config.json with env var overrides."""
    if CONFIG_PATH.exists():
        raw = json.loads(CONFIG_PATH.read_text())
        return IlliniHuntConfig(**raw)
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)
    config = IlliniHuntConfig()
    CONFIG_PATH.write_text(config.model_dump_json(indent=2))
    return config
