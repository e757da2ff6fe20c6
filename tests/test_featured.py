"""Tests for trending pool sizing and featured selection."""

from __future__ import annotations

from illinihunt.ranking import (
    FEATURED_PROJECTS_COUNT,
    MIN_TRENDING_POOL_SIZE,
    TRENDING_POOL_MULTIPLIER,
    selectFeatured,
    trendingPoolSize,
)
from tests.conftest import NOW, hoursAgo


def test_constants():
    assert TRENDING_POOL_MULTIPLIER == 5
    assert MIN_TRENDING_POOL_SIZE == 50
    assert FEATURED_PROJECTS_COUNT == 30


def test_poolSizeFloor():
    assert trendingPoolSize(1) == 50
    assert trendingPoolSize(3) == 50
    assert trendingPoolSize(10) == 50


def test_poolSizeMultiplier():
    assert trendingPoolSize(11) == 55
    assert trendingPoolSize(FEATURED_PROJECTS_COUNT) == 150


def test_selectFeaturedTruncatesAfterRanking():
    pool = [
        {"upvotes_count": u, "comments_count": 0, "created_at": hoursAgo(1)}
        for u in (3, 30, 1, 12, 7)
    ]
    top = selectFeatured(pool, count=2, now=NOW)
    assert [p["upvotes_count"] for p in top] == [30, 12]


def test_selectFeaturedIgnoresAgeWindowByDefault():
    old = {"upvotes_count": 5000, "comments_count": 0, "created_at": hoursAgo(24 * 10)}
    new = {"upvotes_count": 1, "comments_count": 0, "created_at": hoursAgo(1)}
    assert selectFeatured([new, old], count=5, now=NOW) == [old, new]


def test_selectFeaturedWithPeriod():
    old = {"upvotes_count": 5000, "comments_count": 0, "created_at": hoursAgo(24 * 10)}
    new = {"upvotes_count": 1, "comments_count": 0, "created_at": hoursAgo(1)}
    assert selectFeatured([new, old], count=5, period="week", now=NOW) == [new]
