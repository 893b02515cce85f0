"""Fallback Orchestrator - resolves indicator requests through cache, providers and catalog.

For every request:

    1. Look the request's cache key up in the CacheStore.
    2. On a miss, walk the indicator's provider chain (strictly sequential).
       Macro and momentum requests instead fan out their independent
       sub-fetches in parallel and merge whatever came back.
    3. If the chain is exhausted, answer from the StaticFallbackCatalog.
    4. Store the payload in the cache, then score its freshness.

Payloads are plain JSON-ready dicts in the shape the HTTP layer returns.
Identical concurrent requests against a cold key are not de-duplicated; each
one calls the providers and the last write to the cache wins.
"""

from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Callable, Sequence

from src.cache.store import CacheStore
from src.fallback.catalog import (
    FALLBACK_SOURCE,
    MOMENTUM_LIVE_DEFAULTS,
    StaticFallbackCatalog,
)
from src.freshness.scorer import FreshnessInfo, FreshnessScorer
from src.ingestion.collectors.base_collector import BaseCollector
from src.ingestion.collectors.worldbank_collector import WorldBankMacroCollector
from src.ingestion.preprocessors.momentum_normalizer import MomentumNormalizer
from src.orchestration.chain import walk_chain
from src.shared.config import Config
from src.shared.errors import ExhaustionError
from src.shared.models import (
    MACRO_FIELDS,
    IndicatorKind,
    IndicatorRecord,
    IndicatorRequest,
    MomentumSnapshot,
)
from src.shared.utils import parse_timestamp, setup_logger, utc_now

CACHE_SOURCE = "cache"
MOMENTUM_LIVE_SOURCE = "live-aggregators-proxy"


@dataclass(frozen=True)
class Resolution:
    """What the orchestrator hands back to the HTTP layer."""

    payload: Any
    source: str
    last_updated: datetime | None
    cache_hit: bool
    freshness: FreshnessInfo


class FallbackOrchestrator:
    """Drives collectors, cache and catalog to answer indicator requests.

    Args:
        cache: Shared CacheStore instance.
        catalog: Static fallback catalog.
        inflation_chain: Inflation providers in priority order.
        fx_chain: Exchange rate providers in priority order.
        macro_collector: Provider of the five macro sub-indicators.
        momentum_collectors: Independent momentum inputs fetched concurrently.
        scorer: Freshness scorer (defaults to one using the same clock).
        ttls: Cache TTL per indicator kind; None means no expiry.
        fallback_ttl: TTL applied to payloads produced by the fallback tier.
        max_workers: Thread pool size for macro/momentum fan-out.
        clock: Source of "now" (aware UTC datetimes).
    """

    def __init__(
        self,
        cache: CacheStore,
        catalog: StaticFallbackCatalog,
        inflation_chain: Sequence[BaseCollector],
        fx_chain: Sequence[BaseCollector],
        macro_collector: WorldBankMacroCollector,
        momentum_collectors: Sequence[BaseCollector],
        scorer: FreshnessScorer | None = None,
        ttls: dict[IndicatorKind, timedelta | None] | None = None,
        fallback_ttl: timedelta | None = None,
        max_workers: int | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.cache = cache
        self.catalog = catalog
        self.inflation_chain = list(inflation_chain)
        self.fx_chain = list(fx_chain)
        self.macro_collector = macro_collector
        self.momentum_collectors = list(momentum_collectors)
        self.momentum_normalizer = MomentumNormalizer(clock=clock)
        self.scorer = scorer or FreshnessScorer(clock=clock)
        self.ttls = ttls if ttls is not None else self.default_ttls()
        self.fallback_ttl = (
            fallback_ttl
            if fallback_ttl is not None
            else timedelta(minutes=Config.FALLBACK_CACHE_TTL_MINUTES)
        )
        self.max_workers = max_workers or Config.MACRO_MAX_WORKERS
        self._clock = clock
        self.logger = setup_logger(self.__class__.__name__, level=Config.LOG_LEVEL)

        self._resolvers = {
            IndicatorKind.INFLATION: self._resolve_inflation,
            IndicatorKind.FX_RATE: self._resolve_fx,
            IndicatorKind.MACRO: self._resolve_macro,
            IndicatorKind.MOMENTUM: self._resolve_momentum,
        }

    @staticmethod
    def default_ttls() -> dict[IndicatorKind, timedelta | None]:
        def hours(value: float | None) -> timedelta | None:
            return timedelta(hours=value) if value is not None else None

        return {
            IndicatorKind.MACRO: hours(Config.MACRO_CACHE_TTL_HOURS),
            IndicatorKind.INFLATION: hours(Config.INFLATION_CACHE_TTL_HOURS),
            IndicatorKind.FX_RATE: hours(Config.FX_CACHE_TTL_HOURS),
            IndicatorKind.MOMENTUM: hours(Config.MOMENTUM_CACHE_TTL_HOURS),
        }

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def resolve(self, request: IndicatorRequest) -> Resolution:
        """Answer ``request`` from cache, live providers or the static catalog."""
        entry = self.cache.get(request.cache_key)
        if entry is not None:
            self.logger.debug("Serving %s from cache", request.cache_key)
            return Resolution(
                payload=entry.payload,
                source=CACHE_SOURCE,
                last_updated=entry.last_updated,
                cache_hit=True,
                freshness=self.scorer.score(entry.last_updated, CACHE_SOURCE),
            )

        payload, source, last_updated = self._resolvers[request.kind](request)

        if self._is_cacheable(request, payload):
            ttl = self.fallback_ttl if self._has_fallback_data(payload, source) else self.ttls.get(request.kind)
            self.cache.set(request.cache_key, payload, source=source, ttl=ttl, last_updated=last_updated)

        return Resolution(
            payload=payload,
            source=source,
            last_updated=last_updated,
            cache_hit=False,
            freshness=self.scorer.score(last_updated, source),
        )

    def fallback(self, request: IndicatorRequest) -> Resolution:
        """Build the static-catalog answer for ``request`` directly, bypassing cache and providers."""
        if request.kind is IndicatorKind.INFLATION:
            payload, source, last_updated = self._inflation_payload(
                self.catalog.inflation_records(request.codes), FALLBACK_SOURCE
            )
        elif request.kind is IndicatorKind.FX_RATE:
            payload, source, last_updated = self._fx_fallback(request)
        elif request.kind is IndicatorKind.MOMENTUM:
            payload, source, last_updated = self._momentum_payload(self.catalog.momentum_snapshot())
        else:
            payload, source, last_updated = {}, FALLBACK_SOURCE, None

        return Resolution(
            payload=payload,
            source=source,
            last_updated=last_updated,
            cache_hit=False,
            freshness=self.scorer.score(last_updated, source),
        )

    def health(self) -> dict[str, bool]:
        """Reachability of every distinct provider."""
        collectors: list[BaseCollector] = [
            *self.inflation_chain,
            *self.fx_chain,
            *self.momentum_collectors,
        ]
        status = {c.SOURCE_NAME: c.health_check() for c in collectors}
        status[f"{self.macro_collector.SOURCE_NAME}-macro"] = self.macro_collector.health_check()
        return status

    # ------------------------------------------------------------------
    # Inflation
    # ------------------------------------------------------------------

    def _resolve_inflation(self, request: IndicatorRequest) -> tuple[dict, str, datetime]:
        try:
            outcome = walk_chain(self.inflation_chain, request, partial=True)
        except ExhaustionError as exc:
            self.logger.warning("Inflation chain exhausted, using fallback: %s", exc)
            return self._inflation_payload(self.catalog.inflation_records(request.codes), FALLBACK_SOURCE)

        by_code: dict[str, IndicatorRecord] = {r.code: r for r in outcome.records}
        missing = outcome.missing(request.codes)
        if missing:
            self.logger.warning("Filling %s from fallback catalog", ",".join(missing))
            by_code.update({r.code: r for r in self.catalog.inflation_records(missing)})

        self.logger.info(
            "Inflation resolved for %d codes via %s", len(request.codes), " -> ".join(outcome.sources)
        )
        records = [by_code[code] for code in request.codes]
        return self._inflation_payload(records, outcome.source)

    def _inflation_payload(self, records: list[IndicatorRecord], source: str) -> tuple[dict, str, datetime]:
        now = self._clock()
        payload = {
            "countries": [record.to_dict() for record in records],
            "source": source,
            "lastUpdated": now.isoformat().replace("+00:00", "Z"),
        }
        return payload, source, now

    # ------------------------------------------------------------------
    # Exchange rates
    # ------------------------------------------------------------------

    def _resolve_fx(self, request: IndicatorRequest) -> tuple[dict, str, datetime | None]:
        try:
            outcome = walk_chain(self.fx_chain, request)
        except ExhaustionError as exc:
            self.logger.warning(
                "Using fallback for %s-%s: %s", request.base, request.codes[0], exc
            )
            return self._fx_fallback(request)

        self.logger.info("%s returned data for %s-%s", outcome.source, request.base, request.codes[0])
        return self._fx_payload(request, outcome.records, outcome.source)

    def _fx_fallback(self, request: IndicatorRequest) -> tuple[dict, str, datetime | None]:
        records = self.catalog.fx_records(request.base, request.codes[0], request.historical)
        return self._fx_payload(request, records, FALLBACK_SOURCE)

    def _fx_payload(
        self, request: IndicatorRequest, records: list[IndicatorRecord], source: str
    ) -> tuple[dict, str, datetime | None]:
        quote = request.codes[0]
        latest = records[-1]
        if request.historical:
            payload: dict[str, Any] = {
                "dates": [r.date for r in records],
                "rates": [r.value for r in records],
            }
        else:
            payload = {"rate": latest.value, "date": latest.date}
        payload.update({"source": source, "from": request.base, "to": quote})
        return payload, source, parse_timestamp(latest.date)

    # ------------------------------------------------------------------
    # Macro
    # ------------------------------------------------------------------

    def _resolve_macro(self, request: IndicatorRequest) -> tuple[dict, str, datetime | None]:
        raw: dict[str, Any] = {}
        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            futures = {
                executor.submit(self.macro_collector.fetch_indicator, request, field): field
                for field in MACRO_FIELDS
            }
            for future in as_completed(futures):
                field = futures[future]
                result = future.result()
                if result.ok:
                    raw[field] = result.records[0]

        if not raw:
            self.logger.warning("All macro sub-indicators failed for %s", ",".join(request.codes))
            return {}, FALLBACK_SOURCE, None

        records = self.macro_collector.merge(raw, request)
        if not records:
            self.logger.warning("Macro sub-indicators returned no usable values")
            return {}, FALLBACK_SOURCE, None

        self.logger.info(
            "Macro resolved %d/%d countries from %d/%d sub-indicators",
            len(records),
            len(request.codes),
            len(raw),
            len(MACRO_FIELDS),
        )
        payload = {record.code: record.to_dict() for record in records}
        return payload, self.macro_collector.SOURCE_NAME, self._clock()

    # ------------------------------------------------------------------
    # Momentum
    # ------------------------------------------------------------------

    def _resolve_momentum(self, request: IndicatorRequest) -> tuple[dict, str, datetime | None]:
        raw: dict[str, Any] = {"defaults": MOMENTUM_LIVE_DEFAULTS}
        with ThreadPoolExecutor(max_workers=max(1, len(self.momentum_collectors))) as executor:
            futures = {
                executor.submit(collector.fetch, request): collector.SOURCE_NAME
                for collector in self.momentum_collectors
            }
            for future in as_completed(futures):
                result = future.result()
                if result.ok:
                    raw[futures[future]] = result.records[0]

        if len(raw) == 1:
            self.logger.warning("All momentum sources failed, using proxy fallback")
            return self._momentum_payload(self.catalog.momentum_snapshot())

        snapshot = self.momentum_normalizer.normalize(raw, request, MOMENTUM_LIVE_SOURCE)[0]
        return self._momentum_payload(snapshot)

    @staticmethod
    def _momentum_payload(snapshot: MomentumSnapshot) -> tuple[dict, str, datetime | None]:
        payload = {"data": snapshot.to_dict(), "source": snapshot.source}
        return payload, snapshot.source, parse_timestamp(snapshot.last_updated)

    # ------------------------------------------------------------------
    # Cache policy
    # ------------------------------------------------------------------

    @staticmethod
    def _is_cacheable(request: IndicatorRequest, payload: Any) -> bool:
        # An empty macro map means total failure; retry upstream next time
        return not (request.kind is IndicatorKind.MACRO and not payload)

    @staticmethod
    def _has_fallback_data(payload: Any, source: str) -> bool:
        """True when the payload, or any per-country record in it, came from the catalog."""
        if FALLBACK_SOURCE in source:
            return True
        records = payload.get("countries", []) if isinstance(payload, dict) else []
        return any(record.get("source") == FALLBACK_SOURCE for record in records)
