"""Freshness and reliability scoring for returned data.

Age is measured from the data's ``lastUpdated`` timestamp; reliability is a
fixed per-source tier. Together they give a 0-100 quality score:

    reliability points   high 50 / medium 30 / low 10
    freshness points     <=24h 50 / <=168h 30 / <=720h 10 / older 0
"""

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Callable

from src.shared.utils import to_utc, utc_now

FRESH_HOURS = 24
WEEK_HOURS = 168
MONTH_HOURS = 720

SOURCE_RELIABILITY: dict[str, str] = {
    # statistical agencies and central-bank reference data
    "imf": "high",
    "statbureau": "high",
    "tradingeconomics": "high",
    "fred": "high",
    "frankfurter": "high",
    # aggregators and cached copies
    "worldbank": "medium",
    "defillama": "medium",
    "alternative-me": "medium",
    "live-aggregators-proxy": "medium",
    "cache": "medium",
    # static data
    "fallback": "low",
    "proxy-fallback": "low",
}

RELIABILITY_POINTS: dict[str, int] = {"high": 50, "medium": 30, "low": 10}

WARNING_UNKNOWN = "Data freshness unknown"
WARNING_VERY_STALE = "Data is very stale (> 1 month old)"
WARNING_OUTDATED = "Data may be outdated (> 1 week old)"
WARNING_BACKUP = "Using backup data sources"


@dataclass(frozen=True)
class FreshnessInfo:
    source: str
    last_updated: str
    age_in_hours: float
    is_fresh: bool
    reliability: str
    quality_score: int
    warning: str | None = None

    def to_headers(self) -> dict[str, str]:
        """Render as ``X-Data-*`` response headers."""
        headers = {
            "X-Data-Source": self.source,
            "X-Data-Last-Updated": self.last_updated,
            "X-Data-Age-Hours": "unknown" if math.isinf(self.age_in_hours) else f"{self.age_in_hours:.1f}",
            "X-Data-Fresh": "true" if self.is_fresh else "false",
            "X-Data-Reliability": self.reliability,
            "X-Data-Quality": str(self.quality_score),
        }
        if self.warning:
            headers["X-Data-Warning"] = self.warning
        return headers


def reliability_for(source: str) -> str:
    """Reliability tier for a source label; unrecognized sources are 'low'."""
    key = source.split(" ")[0].lower() if source else ""
    return SOURCE_RELIABILITY.get(key, "low")


def quality_score(source: str, age_in_hours: float) -> int:
    score = RELIABILITY_POINTS[reliability_for(source)]
    if age_in_hours <= FRESH_HOURS:
        score += 50
    elif age_in_hours <= WEEK_HOURS:
        score += 30
    elif age_in_hours <= MONTH_HOURS:
        score += 10
    return min(100, max(0, score))


class FreshnessScorer:
    """Computes FreshnessInfo for a data source and its last update time."""

    def __init__(self, clock: Callable[[], datetime] = utc_now) -> None:
        self._clock = clock

    def score(self, last_updated: datetime | None, source: str) -> FreshnessInfo:
        if last_updated is None:
            return FreshnessInfo(
                source=source,
                last_updated="Unknown",
                age_in_hours=math.inf,
                is_fresh=False,
                reliability="low",
                quality_score=quality_score("", math.inf),
                warning=WARNING_UNKNOWN,
            )

        updated = to_utc(last_updated)
        age = max(0.0, (self._clock() - updated).total_seconds() / 3600)

        if age > MONTH_HOURS:
            warning = WARNING_VERY_STALE
        elif age > WEEK_HOURS:
            warning = WARNING_OUTDATED
        elif "fallback" in source:
            warning = WARNING_BACKUP
        else:
            warning = None

        return FreshnessInfo(
            source=source,
            last_updated=updated.strftime("%Y-%m-%d %H:%M:%S UTC"),
            age_in_hours=age,
            is_fresh=age <= FRESH_HOURS,
            reliability=reliability_for(source),
            quality_score=quality_score(source, age),
            warning=warning,
        )


def format_last_updated(last_updated: datetime | None, now: datetime | None = None) -> str:
    """Human-friendly relative age ("3 hours ago", "2 days ago", or the date)."""
    if last_updated is None:
        return "Unknown"
    updated = to_utc(last_updated)
    hours = ((now or utc_now()) - updated).total_seconds() / 3600
    if hours < 1:
        return "Less than 1 hour ago"
    if hours < FRESH_HOURS:
        return f"{round(hours)} hours ago"
    if hours < WEEK_HOURS:
        return f"{round(hours / 24)} days ago"
    return updated.strftime("%Y-%m-%d")
