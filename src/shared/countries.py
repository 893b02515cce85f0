"""Closed enumeration of the country and currency codes the service understands.

Every provider, normalizer and the static fallback catalog resolves codes
through this module, so a code either maps to the same country everywhere or
is dropped. Currency codes are accepted as aliases for their country
(``COP`` -> ``COL``); records always carry the ISO3 country code.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class Country:
    """Immutable descriptor for a supported country."""

    code: str  # ISO 3166-1 alpha-3
    name: str
    region: str
    currency: str  # ISO 4217
    statbureau_slug: str | None = None


REGIONS: tuple[str, ...] = ("Africa", "Asia", "Europe", "USA", "LatAm")

_COUNTRIES: tuple[Country, ...] = (
    # Africa
    Country("KEN", "Kenya", "Africa", "KES", "kenya"),
    Country("GHA", "Ghana", "Africa", "GHS"),
    Country("ZAF", "South Africa", "Africa", "ZAR", "south-africa"),
    Country("EGY", "Egypt", "Africa", "EGP"),
    Country("NGA", "Nigeria", "Africa", "NGN", "nigeria"),
    # Latin America
    Country("BRA", "Brazil", "LatAm", "BRL", "brazil"),
    Country("ARG", "Argentina", "LatAm", "ARS"),
    Country("MEX", "Mexico", "LatAm", "MXN", "mexico"),
    Country("COL", "Colombia", "LatAm", "COP"),
    Country("CHL", "Chile", "LatAm", "CLP"),
    # Asia-Pacific
    Country("IND", "India", "Asia", "INR", "india"),
    Country("THA", "Thailand", "Asia", "THB"),
    Country("VNM", "Vietnam", "Asia", "VND"),
    Country("PHL", "Philippines", "Asia", "PHP"),
    Country("IDN", "Indonesia", "Asia", "IDR"),
    Country("JPN", "Japan", "Asia", "JPY", "japan"),
    Country("KOR", "South Korea", "Asia", "KRW"),
    Country("CHN", "China", "Asia", "CNY", "china"),
    Country("AUS", "Australia", "Asia", "AUD", "australia"),
    # Europe
    Country("DEU", "Germany", "Europe", "EUR", "germany"),
    Country("FRA", "France", "Europe", "EUR", "france"),
    Country("ITA", "Italy", "Europe", "EUR", "italy"),
    Country("ESP", "Spain", "Europe", "EUR", "spain"),
    Country("NLD", "Netherlands", "Europe", "EUR"),
    Country("GBR", "United Kingdom", "Europe", "GBP", "united-kingdom"),
    # North America
    Country("USA", "United States", "USA", "USD", "united-states"),
    Country("CAN", "Canada", "USA", "CAD", "canada"),
)

COUNTRIES: dict[str, Country] = {c.code: c for c in _COUNTRIES}

# Shared currencies resolve to a single representative country
CURRENCY_TO_COUNTRY: dict[str, str] = {
    "KES": "KEN", "GHS": "GHA", "ZAR": "ZAF", "EGP": "EGY", "NGN": "NGA",
    "BRL": "BRA", "ARS": "ARG", "MXN": "MEX", "COP": "COL", "CLP": "CHL",
    "INR": "IND", "THB": "THA", "VND": "VNM", "PHP": "PHL", "IDR": "IDN",
    "JPY": "JPN", "KRW": "KOR", "CNY": "CHN", "AUD": "AUS",
    "EUR": "DEU", "GBP": "GBR", "USD": "USA", "CAD": "CAN",
}

# Currencies that may be quoted without an owning country in the enumeration
EXTRA_CURRENCIES: tuple[str, ...] = (
    "CHF", "SEK", "NOK", "DKK", "SGD", "HKD", "NZD",
    "PLN", "CZK", "HUF", "RON", "BGN", "TRY", "MYR", "ILS",
)

PRIORITY_COUNTRIES: tuple[str, ...] = (
    "USA", "DEU", "JPN", "GBR", "FRA", "ITA", "CAN", "KOR", "AUS", "ESP",
    "BRA", "IND", "CHN", "ZAF", "NGA", "EGY", "MEX", "ARG", "COL",
)


def resolve_country(code: str) -> Country | None:
    """Resolve an ISO3 country code or a currency alias to its Country."""
    key = code.strip().upper()
    if key in COUNTRIES:
        return COUNTRIES[key]
    alias = CURRENCY_TO_COUNTRY.get(key)
    return COUNTRIES.get(alias) if alias else None


def supported_currencies() -> frozenset[str]:
    """All currency codes the FX lookup accepts."""
    return frozenset(c.currency for c in _COUNTRIES) | frozenset(EXTRA_CURRENCIES)


def resolve_currency(code: str) -> str | None:
    """Normalize a currency code, returning None when it is not enumerated."""
    key = code.strip().upper()
    return key if key in supported_currencies() else None
