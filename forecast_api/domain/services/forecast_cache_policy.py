"""Forecast cache policy - pure staleness decisions over stored entries.

A location's stored forecast set is judged by its most recent
``retrieved_at``. The set is fresh while that timestamp is no older than
``now - freshness_window``; an empty set is always stale. No I/O happens
here.
"""
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable, Optional

from forecast_api.domain.entities.forecast_entry import ForecastEntry

DEFAULT_FRESHNESS_WINDOW = timedelta(hours=1)


def latest_retrieval(entries: Iterable[ForecastEntry]) -> Optional[datetime]:
    """Most recent retrieved_at among entries, or None when there are none."""
    return max((entry.retrieved_at for entry in entries), default=None)


def is_stale(
    entries: Iterable[ForecastEntry],
    now: datetime,
    freshness_window: timedelta = DEFAULT_FRESHNESS_WINDOW,
) -> bool:
    """True when entries must be refetched.

    Heterogeneous timestamps are judged optimistically by the newest one.
    """
    latest = latest_retrieval(entries)
    if latest is None:
        return True
    return latest < now - freshness_window


@dataclass(frozen=True)
class CacheDecision:
    """Outcome of evaluating a stored forecast set."""
    stale: bool
    latest_retrieved_at: Optional[datetime]

    @property
    def hit(self) -> bool:
        return not self.stale


class ForecastCachePolicy:
    """Staleness rule bound to a configured freshness window."""

    def __init__(self, freshness_window: timedelta = DEFAULT_FRESHNESS_WINDOW):
        if freshness_window < timedelta(0):
            raise ValueError("Freshness window cannot be negative")
        self.freshness_window = freshness_window

    def is_stale(self, entries: Iterable[ForecastEntry], now: datetime) -> bool:
        return is_stale(entries, now, self.freshness_window)

    def evaluate(self, entries: Iterable[ForecastEntry], now: datetime) -> CacheDecision:
        entries = list(entries)
        return CacheDecision(
            stale=is_stale(entries, now, self.freshness_window),
            latest_retrieved_at=latest_retrieval(entries),
        )
