"""Error taxonomy for the indicator service.

- ValidationError: malformed or missing request parameters (surfaced as HTTP 400).
- ProviderError: a single upstream call failed; recovered by the orchestrator.
- ExhaustionError: every provider in a chain failed; recovered by the static catalog.
- CatalogError: the country/currency enumeration is inconsistent (raised at startup).
"""

from enum import Enum


class ProviderErrorKind(str, Enum):
    """Failure modes a provider call can end in."""

    UNAVAILABLE = "unavailable"
    RATE_LIMITED = "rate_limited"
    MALFORMED_RESPONSE = "malformed_response"
    TIMEOUT = "timeout"


class ProviderError(Exception):
    """Typed failure of one upstream provider call."""

    def __init__(self, kind: ProviderErrorKind, provider: str, message: str = "") -> None:
        self.kind = kind
        self.provider = provider
        self.message = message
        super().__init__(f"[{provider}] {kind.value}: {message}" if message else f"[{provider}] {kind.value}")


class ValidationError(ValueError):
    """Request parameter is missing or malformed."""


class ExhaustionError(Exception):
    """All providers in a fallback chain failed or returned nothing usable."""

    def __init__(self, errors: list[ProviderError] | None = None) -> None:
        self.errors = list(errors or [])
        providers = ", ".join(e.provider for e in self.errors) or "none"
        super().__init__(f"All providers exhausted (tried: {providers})")


class CatalogError(ValueError):
    """Country/currency enumeration failed its consistency check."""
