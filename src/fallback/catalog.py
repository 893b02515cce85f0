"""Static fallback catalog - last-resort data used when every live provider fails.

Regional inflation history, USD reference rates and momentum defaults are
hard-coded here. Lookups never fail: a recognized code without catalog data
yields a null-valued record rather than an error.

``validate()`` cross-checks this catalog against the shared country/currency
enumeration and is run once at application startup.
"""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Callable, Iterable, Mapping

import numpy as np
import pandas as pd

from src.shared.countries import (
    COUNTRIES,
    CURRENCY_TO_COUNTRY,
    PRIORITY_COUNTRIES,
    REGIONS,
    supported_currencies,
)
from src.shared.errors import CatalogError
from src.shared.models import IndicatorRecord, MomentumSnapshot
from src.shared.utils import utc_now

FALLBACK_SOURCE = "fallback"
MOMENTUM_FALLBACK_SOURCE = "proxy-fallback"


@dataclass(frozen=True)
class RegionalInflation:
    """Immutable regional inflation history (annual %, most recent year last)."""

    region: str
    avg_rate: float
    history: tuple[tuple[int, float], ...]

    @property
    def latest(self) -> tuple[int, float] | None:
        return self.history[-1] if self.history else None


REGIONAL_INFLATION: dict[str, RegionalInflation] = {
    "Africa": RegionalInflation("Africa", 12.5, ((2020, 11.8), (2021, 13.2), (2022, 14.1), (2023, 12.5))),
    "Asia": RegionalInflation("Asia", 4.2, ((2020, 3.8), (2021, 4.5), (2022, 4.8), (2023, 4.2))),
    "Europe": RegionalInflation("Europe", 6.8, ((2020, 1.9), (2021, 3.2), (2022, 9.2), (2023, 6.8))),
    "USA": RegionalInflation("USA", 4.1, ((2020, 1.2), (2021, 4.7), (2022, 8.0), (2023, 4.1))),
    "LatAm": RegionalInflation("LatAm", 8.7, ((2020, 6.5), (2021, 8.2), (2022, 10.1), (2023, 8.7))),
}

# Units of currency per 1 USD
USD_RATES: dict[str, float] = {
    "USD": 1.0,
    "EUR": 0.92, "GBP": 0.79, "CHF": 0.88, "SEK": 10.5, "NOK": 10.7, "DKK": 6.9,
    "JPY": 150.0, "KRW": 1350.0, "CNY": 7.2, "INR": 83.0, "IDR": 15800.0, "THB": 36.0,
    "PHP": 56.0, "VND": 25000.0, "SGD": 1.34, "HKD": 7.8, "AUD": 1.52, "NZD": 1.65,
    "CAD": 1.36, "MXN": 17.0, "BRL": 5.0, "ARS": 850.0, "CLP": 930.0, "COP": 4000.0,
    "KES": 130.0, "GHS": 12.5, "NGN": 1500.0, "ZAR": 18.5, "EGP": 47.0,
    "PLN": 4.0, "CZK": 23.0, "HUF": 360.0, "RON": 4.6, "BGN": 1.8, "TRY": 32.0,
    "MYR": 4.7, "ILS": 3.7,
}

# Used to fill gaps when only one momentum upstream answered
MOMENTUM_LIVE_DEFAULTS: dict[str, float] = {
    "globalStablecoinCap": 160_000_000_000,
    "stablecoin24hChange": 0.05,
    "marketSentiment": 50,
    "rwaGrowth7d": 1.2,
}

# Served when no momentum upstream answered
MOMENTUM_FALLBACK: dict[str, float] = {
    "globalStablecoinCap": 162_400_000_000,
    "stablecoin24hChange": 0.12,
    "marketSentiment": 65,
    "rwaGrowth7d": 0.8,
}

SYNTHETIC_SERIES_POINTS = 30
SYNTHETIC_VARIATION = 0.05


class StaticFallbackCatalog:
    """Terminal, always-succeeding data source for the orchestrator."""

    def __init__(
        self,
        rng: np.random.Generator | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._rng = rng or np.random.default_rng()
        self._clock = clock

    # ------------------------------------------------------------------
    # Inflation
    # ------------------------------------------------------------------

    def inflation_record(self, code: str) -> IndicatorRecord:
        """Fallback record for one ISO3 code (value None if the catalog has none)."""
        country = COUNTRIES.get(code)
        regional = REGIONAL_INFLATION.get(country.region) if country else None
        latest = regional.latest if regional else None
        return IndicatorRecord(
            country=country.name if country else code,
            code=code,
            value=latest[1] if latest else None,
            year=latest[0] if latest else None,
            source=FALLBACK_SOURCE,
        )

    def inflation_records(self, codes: tuple[str, ...] | list[str]) -> list[IndicatorRecord]:
        return [self.inflation_record(code) for code in codes]

    # ------------------------------------------------------------------
    # Exchange rates
    # ------------------------------------------------------------------

    def fx_rate(self, base: str, quote: str) -> float:
        """Static rate for base/quote: direct, via USD cross, else 1.0."""
        if base == quote:
            return 1.0
        base_usd = USD_RATES.get(base)
        quote_usd = USD_RATES.get(quote)
        if base_usd and quote_usd:
            return quote_usd / base_usd
        return 1.0

    def fx_records(self, base: str, quote: str, historical: bool = False) -> list[IndicatorRecord]:
        """Fallback quote, or a synthetic 30-day series when ``historical``.

        The synthetic series perturbs the static rate by at most +/-5% per point.
        """
        rate = self.fx_rate(base, quote)
        today = self._clock().date()
        if not historical:
            return [self._fx_record(base, quote, rate, today)]

        dates = pd.date_range(end=pd.Timestamp(today), periods=SYNTHETIC_SERIES_POINTS, freq="D")
        factors = self._rng.uniform(
            1 - SYNTHETIC_VARIATION, 1 + SYNTHETIC_VARIATION, size=SYNTHETIC_SERIES_POINTS
        )
        return [
            self._fx_record(base, quote, float(rate * factor), day.date())
            for day, factor in zip(dates, factors)
        ]

    @staticmethod
    def _fx_record(base: str, quote: str, rate: float, day: date) -> IndicatorRecord:
        return IndicatorRecord(
            country=f"{base}/{quote}",
            code=quote,
            value=rate,
            source=FALLBACK_SOURCE,
            date=day.isoformat(),
        )

    # ------------------------------------------------------------------
    # Momentum
    # ------------------------------------------------------------------

    def momentum_snapshot(self) -> MomentumSnapshot:
        return MomentumSnapshot(
            global_stablecoin_cap=float(MOMENTUM_FALLBACK["globalStablecoinCap"]),
            stablecoin_24h_change=float(MOMENTUM_FALLBACK["stablecoin24hChange"]),
            market_sentiment=int(MOMENTUM_FALLBACK["marketSentiment"]),
            rwa_growth_7d=float(MOMENTUM_FALLBACK["rwaGrowth7d"]),
            last_updated=int(self._clock().timestamp() * 1000),
            source=MOMENTUM_FALLBACK_SOURCE,
        )

    # ------------------------------------------------------------------
    # Startup validation
    # ------------------------------------------------------------------

    @staticmethod
    def validate(provider_currencies: Mapping[str, Iterable[str]] | None = None) -> None:
        """Fail fast if the enumeration and the catalog disagree.

        Args:
            provider_currencies: Currency codes each live provider can quote,
                keyed by provider name. Every one must be enumerated.

        Raises:
            CatalogError: Listing every inconsistency found.
        """
        problems: list[str] = []

        for code in PRIORITY_COUNTRIES:
            if code not in COUNTRIES:
                problems.append(f"priority country {code} is not enumerated")

        for country in COUNTRIES.values():
            if country.region not in REGIONS:
                problems.append(f"{country.code} has unknown region {country.region}")
            if country.region not in REGIONAL_INFLATION:
                problems.append(f"region {country.region} has no fallback inflation")
            if country.currency not in USD_RATES:
                problems.append(f"currency {country.currency} of {country.code} has no fallback rate")

        for currency, code in CURRENCY_TO_COUNTRY.items():
            if code not in COUNTRIES:
                problems.append(f"currency alias {currency} points at unknown country {code}")
            elif COUNTRIES[code].currency != currency:
                problems.append(f"currency alias {currency} disagrees with {code}'s currency")
            if currency in COUNTRIES:
                problems.append(f"currency alias {currency} shadows a country code")

        for currency in supported_currencies():
            if currency not in USD_RATES:
                problems.append(f"supported currency {currency} has no fallback rate")

        enumerated = supported_currencies()
        for provider, currencies in (provider_currencies or {}).items():
            for currency in sorted(set(currencies) - enumerated):
                problems.append(f"{provider} quotes {currency}, which is not enumerated")

        if problems:
            raise CatalogError("; ".join(sorted(problems)))
