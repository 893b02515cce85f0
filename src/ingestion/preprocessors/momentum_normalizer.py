"""Momentum Normalizer - stablecoin supply and sentiment payloads to a snapshot."""

from datetime import datetime
from pathlib import Path
from typing import Any, Callable

from src.ingestion.preprocessors.base_preprocessor import BasePreprocessor
from src.shared.models import IndicatorRequest, MomentumSnapshot
from src.shared.utils import utc_now


class MomentumNormalizer(BasePreprocessor):
    """Combines DefiLlama stablecoin supply with the Fear & Greed index.

    Either input may be missing; absent pieces come from ``defaults`` (the
    static catalog's momentum entry). The 24h change is computed from the last
    two chart points and rounded to two decimals; a move that rounds to zero
    is reported as the default change.
    """

    CATEGORY = "momentum"

    _SUPPLY_KEYS = ("totalCirculatingUSD", "totalCirculating")
    _CURRENCY_KEYS = ("peggedUSD", "usd")

    def __init__(self, clock: Callable[[], datetime] = utc_now, log_file: Path | None = None) -> None:
        super().__init__(log_file)
        self._clock = clock

    def normalize(self, raw: dict[str, Any], request: IndicatorRequest, source: str) -> list[MomentumSnapshot]:
        defaults: dict[str, Any] = raw.get("defaults") or {}
        cap = defaults.get("globalStablecoinCap")
        change = defaults.get("stablecoin24hChange")
        sentiment = defaults.get("marketSentiment")

        supply = self._supply_points(raw.get("defillama"))
        if supply:
            latest = supply[-1]
            previous = supply[-2] if len(supply) > 1 else latest
            cap = latest
            moved = round((latest - previous) / previous * 100, 2) if previous else 0.0
            # A flat or unreadable move keeps the default change
            if moved:
                change = moved

        parsed_sentiment = self._sentiment(raw.get("alternative-me"))
        if parsed_sentiment is not None:
            sentiment = parsed_sentiment

        if cap is None or change is None or sentiment is None:
            raise ValueError("momentum defaults must supply every field")

        return [
            MomentumSnapshot(
                global_stablecoin_cap=float(cap),
                stablecoin_24h_change=float(change),
                market_sentiment=int(sentiment),
                rwa_growth_7d=float(defaults.get("rwaGrowth7d", 0.0)),
                last_updated=int(self._clock().timestamp() * 1000),
                source=source,
            )
        ]

    def _supply_points(self, payload: Any) -> list[float]:
        if not isinstance(payload, list):
            return []
        points = []
        for point in payload:
            if not isinstance(point, dict):
                continue
            for supply_key in self._SUPPLY_KEYS:
                totals = point.get(supply_key)
                if isinstance(totals, dict):
                    value = next(
                        (totals[k] for k in self._CURRENCY_KEYS if isinstance(totals.get(k), (int, float))),
                        None,
                    )
                    if value is not None:
                        points.append(float(value))
                    break
        return points

    def _sentiment(self, payload: Any) -> int | None:
        try:
            return int(payload["data"][0]["value"])
        except (KeyError, IndexError, TypeError, ValueError):
            return None
