"""Process-local cache for normalized indicator payloads."""

from src.cache.store import CacheEntry, CacheStore

__all__ = ["CacheEntry", "CacheStore"]
