"""Trending score: engagement signal decayed by age (Hacker News style).

    score = (upvotes + comments * COMMENT_WEIGHT)
            / (age_hours + GRAVITY_OFFSET) ** GRAVITY

Comments weigh more than upvotes. GRAVITY sets how fast older projects sink;
GRAVITY_OFFSET keeps brand-new projects from dividing by ~zero.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Generic, TypeVar

from dateutil.relativedelta import relativedelta

logger = logging.getLogger("illinihunt")

COMMENT_WEIGHT = 2
GRAVITY = 1.8
GRAVITY_OFFSET = 2

_MS_PER_HOUR = 3_600_000

T = TypeVar("T")


class TrendingPeriod(str, Enum):
    TODAY = "today"
    WEEK = "week"
    MONTH = "month"
    ALL = "all"


_LABELS = {
    TrendingPeriod.TODAY: "Today",
    TrendingPeriod.WEEK: "This Week",
    TrendingPeriod.MONTH: "This Month",
    TrendingPeriod.ALL: "All Time",
}


class InvalidTimestampError(ValueError):
    """created_at could not be parsed as ISO-8601."""

    def __init__(self, value: Any):
        super().__init__(f"Invalid created_at timestamp: {value!r}")
        self.value = value


@dataclass(frozen=True)
class ScoredItem(Generic[T]):
    item: T
    score: float
    age_hours: float


def utcNow() -> datetime:
    return datetime.now(timezone.utc)


def _resolveNow(now: datetime | None) -> datetime:
    if now is None:
        return utcNow()
    return now if now.tzinfo else now.replace(tzinfo=timezone.utc)


def _decayed(signal: float, age_hours: float) -> float:
    return signal / (age_hours + GRAVITY_OFFSET) ** GRAVITY


def parseTimestamp(value: str | datetime | None) -> datetime | None:
    """Parse an ISO-8601 string (or pass a datetime through). Naive values are UTC."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        dt = value
    else:
        try:
            dt = datetime.fromisoformat(value)
        except (TypeError, ValueError):
            raise InvalidTimestampError(value) from None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def ageHours(created_at: str | datetime | None, now: datetime) -> float:
    """Hours between created_at and now, clamped at zero (future timestamps count as new)."""
    created = parseTimestamp(created_at) or now
    age_ms = max((now - created) / timedelta(milliseconds=1), 0)
    return age_ms / _MS_PER_HOUR


def trendingScore(
    upvotes: int,
    comments: int,
    created_at: str | datetime | None,
    now: datetime | None = None,
) -> float:
    """Calculate trending score for a single project."""
    now = _resolveNow(now)
    return _decayed(upvotes + comments * COMMENT_WEIGHT, ageHours(created_at, now))


def periodCutoff(period: TrendingPeriod | str, now: datetime | None = None) -> datetime | None:
    """Earliest created_at allowed for a period; None means no filtering.

    "month" is a calendar month and clamps to the last valid day,
    so March 31 goes back to February 28 (or 29).
    """
    now = _resolveNow(now)
    period = TrendingPeriod(period)
    if period is TrendingPeriod.TODAY:
        return now - timedelta(hours=24)
    if period is TrendingPeriod.WEEK:
        return now - timedelta(days=7)
    if period is TrendingPeriod.MONTH:
        return now - relativedelta(months=1)
    return None


def periodLabel(period: TrendingPeriod | str) -> str:
    """Human-readable label for each period."""
    return _LABELS[TrendingPeriod(period)]


def _field(item: Any, name: str) -> Any:
    if isinstance(item, Mapping):
        return item.get(name)
    # sqlite3.Row and similar: keyed access without the Mapping ABC
    if hasattr(item, "keys"):
        return item[name] if name in item.keys() else None
    return getattr(item, name, None)


def scoreItems(
    items: Iterable[T],
    period: TrendingPeriod | str = TrendingPeriod.WEEK,
    now: datetime | None = None,
) -> list[ScoredItem[T]]:
    """Filter items to the period window, score them, sort by descending score.

    Items only need upvotes_count, comments_count and created_at, as
    attributes or mapping keys. One `now` is used for the whole pass.
    """
    now = _resolveNow(now)
    cutoff = periodCutoff(period, now)

    if cutoff is not None:
        kept = []
        for item in items:
            created = parseTimestamp(_field(item, "created_at"))
            if created is not None and created >= cutoff:
                kept.append(item)
    else:
        kept = list(items)

    scored = []
    for item in kept:
        age = ageHours(_field(item, "created_at"), now)
        signal = (_field(item, "upvotes_count") or 0) + (
            _field(item, "comments_count") or 0
        ) * COMMENT_WEIGHT
        scored.append(ScoredItem(item=item, score=_decayed(signal, age), age_hours=age))

    # sorted() is stable: equal scores keep input order
    scored = sorted(scored, key=lambda s: s.score, reverse=True)
    logger.debug("Ranked %d items for period %s", len(scored), TrendingPeriod(period).value)
    return scored


def rankByTrending(
    items: Iterable[T],
    period: TrendingPeriod | str = TrendingPeriod.WEEK,
    now: datetime | None = None,
) -> list[T]:
    """Rank items by trending score. Returns the original objects, reordered."""
    return [s.item for s in scoreItems(items, period, now)]
