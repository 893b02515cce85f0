"""Static fallback catalog."""

from src.fallback.catalog import (
    FALLBACK_SOURCE,
    MOMENTUM_FALLBACK_SOURCE,
    StaticFallbackCatalog,
)

__all__ = ["FALLBACK_SOURCE", "MOMENTUM_FALLBACK_SOURCE", "StaticFallbackCatalog"]
