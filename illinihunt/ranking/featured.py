"""Featured selection: rank an oversized candidate pool, then truncate."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from typing import TypeVar

from illinihunt.ranking.trending import TrendingPeriod, rankByTrending

# Pool size configuration for trending projects
TRENDING_POOL_MULTIPLIER = 5
MIN_TRENDING_POOL_SIZE = 50
FEATURED_PROJECTS_COUNT = 30

T = TypeVar("T")


def trendingPoolSize(count: int) -> int:
    """Candidates to rank before keeping `count`: max(count * 5, 50).

    A small pool would hand the featured list only the freshest projects.
    """
    return max(count * TRENDING_POOL_MULTIPLIER, MIN_TRENDING_POOL_SIZE)


def selectFeatured(
    pool: Iterable[T],
    count: int = FEATURED_PROJECTS_COUNT,
    period: TrendingPeriod | str = TrendingPeriod.ALL,
    now: datetime | None = None,
) -> list[T]:
    """Top `count` items of the pool by trending score."""
    return rankByTrending(pool, period, now)[:count]
