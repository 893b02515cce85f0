"""Freshness and reliability scoring."""

from src.freshness.scorer import (
    FreshnessInfo,
    FreshnessScorer,
    format_last_updated,
    quality_score,
    reliability_for,
)

__all__ = [
    "FreshnessInfo",
    "FreshnessScorer",
    "format_last_updated",
    "quality_score",
    "reliability_for",
]
