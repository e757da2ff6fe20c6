"""Trending ranking: decayed engagement scores and featured pool policy."""

from illinihunt.ranking.featured import (
    FEATURED_PROJECTS_COUNT,
    MIN_TRENDING_POOL_SIZE,
    TRENDING_POOL_MULTIPLIER,
    selectFeatured,
    trendingPoolSize,
)
from illinihunt.ranking.trending import (
    COMMENT_WEIGHT,
    GRAVITY,
    GRAVITY_OFFSET,
    InvalidTimestampError,
    ScoredItem,
    TrendingPeriod,
    periodCutoff,
    periodLabel,
    rankByTrending,
    scoreItems,
    trendingScore,
)

__all__ = [
    "COMMENT_WEIGHT",
    "FEATURED_PROJECTS_COUNT",
    "GRAVITY",
    "GRAVITY_OFFSET",
    "InvalidTimestampError",
    "MIN_TRENDING_POOL_SIZE",
    "ScoredItem",
    "TRENDING_POOL_MULTIPLIER",
    "TrendingPeriod",
    "periodCutoff",
    "periodLabel",
    "rankByTrending",
    "scoreItems",
    "selectFeatured",
    "trendingPoolSize",
    "trendingScore",
]
