"""Request, record and result types shared by collectors, normalizers and the orchestrator."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from src.shared.countries import resolve_country, resolve_currency
from src.shared.errors import ProviderError, ValidationError


class IndicatorKind(str, Enum):
    INFLATION = "inflation"
    FX_RATE = "fx-rate"
    MACRO = "macro"
    MOMENTUM = "momentum"


@dataclass(frozen=True)
class IndicatorRequest:
    """Immutable description of one indicator lookup.

    ``codes`` holds canonical ISO3 country codes (inflation, macro) or the quote
    currency (fx-rate), deduplicated in request order. ``base`` is the base
    currency for fx-rate requests and None otherwise.
    """

    kind: IndicatorKind
    codes: tuple[str, ...] = ()
    historical: bool = False
    base: str | None = None

    def __post_init__(self) -> None:
        if self.kind is not IndicatorKind.MOMENTUM and not self.codes:
            raise ValidationError(f"{self.kind.value} request needs at least one code")
        if len(set(self.codes)) != len(self.codes):
            raise ValidationError("codes must be deduplicated")
        if self.kind is IndicatorKind.FX_RATE and not self.base:
            raise ValidationError("fx-rate request needs a base currency")

    @classmethod
    def for_countries(cls, kind: IndicatorKind, raw_codes: list[str] | tuple[str, ...]) -> "IndicatorRequest":
        """Build a country-keyed request, dropping codes outside the enumeration.

        Raises:
            ValidationError: If no code resolves to a known country.
        """
        codes: list[str] = []
        for raw in raw_codes:
            country = resolve_country(raw)
            if country is not None and country.code not in codes:
                codes.append(country.code)
        if not codes:
            raise ValidationError("No recognized country codes in request")
        return cls(kind=kind, codes=tuple(codes))

    @classmethod
    def for_exchange_rate(cls, from_currency: str, to_currency: str, historical: bool = False) -> "IndicatorRequest":
        base = resolve_currency(from_currency)
        quote = resolve_currency(to_currency)
        if base is None:
            raise ValidationError(f"Unsupported 'from' currency: {from_currency}")
        if quote is None:
            raise ValidationError(f"Unsupported 'to' currency: {to_currency}")
        return cls(kind=IndicatorKind.FX_RATE, codes=(quote,), historical=historical, base=base)

    @classmethod
    def for_momentum(cls) -> "IndicatorRequest":
        return cls(kind=IndicatorKind.MOMENTUM)

    @property
    def cache_key(self) -> str:
        """Composite key: kind, base currency, sorted codes, historical flag."""
        codes = ",".join(sorted(self.codes))
        return f"{self.kind.value}|{self.base or ''}|{codes}|{int(self.historical)}"


@dataclass(frozen=True)
class IndicatorRecord:
    """One normalized observation for a country (inflation) or currency pair (fx-rate)."""

    country: str
    code: str
    value: float | None
    source: str
    year: int | None = None
    date: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "country": self.country,
            "countryCode": self.code,
            "value": self.value,
            "year": self.year,
            "source": self.source,
        }


MACRO_FIELDS: tuple[str, ...] = (
    "gdpGrowth",
    "corruptionControl",
    "politicalStability",
    "ruleOfLaw",
    "governmentEffectiveness",
)


@dataclass(frozen=True)
class MacroRecord:
    """Per-country governance and growth scores merged from the macro sub-indicators."""

    code: str
    values: dict[str, float | None]
    year: int
    source: str

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {name: self.values.get(name) for name in MACRO_FIELDS}
        payload["year"] = self.year
        return payload


@dataclass(frozen=True)
class MomentumSnapshot:
    """Stablecoin market momentum summary."""

    global_stablecoin_cap: float
    stablecoin_24h_change: float
    market_sentiment: int
    rwa_growth_7d: float
    last_updated: int  # epoch milliseconds
    source: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "globalStablecoinCap": self.global_stablecoin_cap,
            "stablecoin24hChange": self.stablecoin_24h_change,
            "marketSentiment": self.market_sentiment,
            "rwaGrowth7d": self.rwa_growth_7d,
            "lastUpdated": self.last_updated,
        }


@dataclass(frozen=True)
class ProviderResult:
    """Tagged outcome of a provider call: records on success, a typed error otherwise."""

    provider: str
    records: list = field(default_factory=list)
    error: ProviderError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and len(self.records) > 0

    @classmethod
    def failure(cls, error: ProviderError) -> "ProviderResult":
        return cls(provider=error.provider, records=[], error=error)
