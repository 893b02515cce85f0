"""Process-local TTL cache for resolved indicator payloads.

The store is an explicit object created at startup and handed to the
orchestrator. Entries are never mutated after they are stored: ``set``
replaces an entry wholesale and ``get`` hands out a copy of the payload.
Staleness is checked lazily on lookup; there is no eviction sweep.

No locking is applied. Concurrent writers for the same key are recomputing
the same logical result, so whichever write lands last wins.
"""

import copy
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Callable

from src.shared.utils import setup_logger, utc_now


@dataclass(frozen=True)
class CacheEntry:
    """Immutable cached payload plus the metadata needed to score it."""

    key: str
    payload: Any
    created_at: datetime
    ttl: timedelta | None
    source: str
    last_updated: datetime | None = None

    def is_stale(self, now: datetime) -> bool:
        """Stale strictly after the TTL has elapsed; no TTL means never stale."""
        if self.ttl is None:
            return False
        return now - self.created_at > self.ttl


class CacheStore:
    """Key/value store with per-entry TTL."""

    def __init__(self, clock: Callable[[], datetime] = utc_now) -> None:
        self._entries: dict[str, CacheEntry] = {}
        self._clock = clock
        self.logger = setup_logger(self.__class__.__name__)

    def get(self, key: str) -> CacheEntry | None:
        """Return the live entry for ``key``, or None on a miss.

        A miss is either an absent key or an entry whose TTL has elapsed.
        """
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.is_stale(self._clock()):
            self.logger.debug("Cache entry %s is stale", key)
            return None
        self.logger.debug("Cache hit for %s", key)
        return CacheEntry(
            key=entry.key,
            payload=copy.deepcopy(entry.payload),
            created_at=entry.created_at,
            ttl=entry.ttl,
            source=entry.source,
            last_updated=entry.last_updated,
        )

    def set(
        self,
        key: str,
        payload: Any,
        source: str,
        ttl: timedelta | None = None,
        last_updated: datetime | None = None,
    ) -> CacheEntry:
        """Store ``payload`` under ``key``, replacing any previous entry."""
        entry = CacheEntry(
            key=key,
            payload=copy.deepcopy(payload),
            created_at=self._clock(),
            ttl=ttl,
            source=source,
            last_updated=last_updated,
        )
        self._entries[key] = entry
        self.logger.debug("Cached %s (source=%s, ttl=%s)", key, source, ttl)
        return entry

    def clear(self) -> None:
        self._entries = {}

    def __len__(self) -> int:
        return len(self._entries)
