"""Tests for the fallback orchestrator (cache -> providers -> static catalog)."""

from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timedelta
from unittest.mock import Mock

import numpy as np
import pytest
import pytz
import requests

from src.cache.store import CacheStore
from src.fallback.catalog import StaticFallbackCatalog
from src.freshness.scorer import WARNING_BACKUP, WARNING_UNKNOWN
from src.ingestion.collectors import FrankfurterCollector, WorldBankMacroCollector
from src.orchestration.orchestrator import FallbackOrchestrator
from src.shared.errors import ProviderErrorKind
from src.shared.models import IndicatorKind, IndicatorRecord, IndicatorRequest, ProviderResult

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

WB_META = {"page": 1, "pages": 1, "per_page": 1000}


def make_response(payload):
    response = Mock()
    response.status_code = 200
    response.ok = True
    response.json.return_value = payload
    return response


def macro_session(payloads=None):
    """Session answering World Bank indicator URLs from ``payloads``; others time out."""
    payloads = payloads or {}

    def get(url, params=None, timeout=None):
        indicator = url.rsplit("/", 1)[-1]
        if indicator in payloads:
            return make_response(payloads[indicator])
        raise requests.exceptions.Timeout(f"{indicator} timed out")

    session = Mock(spec=requests.Session)
    session.get.side_effect = get
    return session


def inflation_record(code, name, value, year, source):
    return IndicatorRecord(country=name, code=code, value=value, year=year, source=source)


@pytest.fixture
def build(clock):
    def _build(inflation=(), fx=(), momentum=(), session=None, ttls=None):
        return FallbackOrchestrator(
            cache=CacheStore(clock=clock),
            catalog=StaticFallbackCatalog(rng=np.random.default_rng(1), clock=clock),
            inflation_chain=list(inflation),
            fx_chain=list(fx),
            macro_collector=WorldBankMacroCollector(session=session or macro_session()),
            momentum_collectors=list(momentum),
            ttls=ttls if ttls is not None else {kind: None for kind in IndicatorKind},
            fallback_ttl=timedelta(minutes=5),
            clock=clock,
        )

    return _build


@pytest.fixture
def usa_cop():
    return IndicatorRequest.for_countries(IndicatorKind.INFLATION, ["USA", "COP"])


# ---------------------------------------------------------------------------
# Inflation
# ---------------------------------------------------------------------------


class TestInflation:
    def test_partial_recovery_across_providers(self, build, make_provider, usa_cop):
        imf = make_provider("imf", [inflation_record("USA", "United States", 2.9, 2025, "imf")])
        worldbank = make_provider(
            "worldbank", [inflation_record("COL", "Colombia", 9.3, 2024, "worldbank")]
        )
        statbureau = make_provider("statbureau", [])
        orchestrator = build(inflation=[imf, worldbank, statbureau])

        resolution = orchestrator.resolve(usa_cop)

        assert resolution.payload["source"] == "imf"
        assert resolution.payload["countries"] == [
            {"country": "United States", "countryCode": "USA", "value": 2.9, "year": 2025, "source": "imf"},
            {"country": "Colombia", "countryCode": "COL", "value": 9.3, "year": 2024, "source": "worldbank"},
        ]
        assert worldbank.fetch.call_args[0][0].codes == ("COL",)
        statbureau.fetch.assert_not_called()
        assert resolution.cache_hit is False
        assert resolution.freshness.source == "imf"

    def test_unresolved_codes_filled_from_catalog(self, build, make_provider, usa_cop):
        imf = make_provider("imf", [inflation_record("USA", "United States", 2.9, 2025, "imf")])
        worldbank = make_provider("worldbank", error_kind=ProviderErrorKind.TIMEOUT)
        orchestrator = build(inflation=[imf, worldbank])

        countries = orchestrator.resolve(usa_cop).payload["countries"]

        assert countries[1] == {
            "country": "Colombia",
            "countryCode": "COL",
            "value": 8.7,
            "year": 2023,
            "source": "fallback",
        }

    def test_exhausted_chain_uses_catalog(self, build, make_provider, usa_cop):
        providers = [
            make_provider("imf", error_kind=ProviderErrorKind.TIMEOUT),
            make_provider("worldbank", error_kind=ProviderErrorKind.UNAVAILABLE),
            make_provider("statbureau", error_kind=ProviderErrorKind.RATE_LIMITED),
        ]
        resolution = build(inflation=providers).resolve(usa_cop)

        assert resolution.source == "fallback"
        assert resolution.payload["source"] == "fallback"
        assert {c["source"] for c in resolution.payload["countries"]} == {"fallback"}
        assert resolution.freshness.warning == WARNING_BACKUP
        assert resolution.freshness.reliability == "low"

    def test_last_updated_is_resolution_time(self, build, make_provider, usa_cop):
        imf = make_provider("imf", [inflation_record("USA", "United States", 2.9, 2025, "imf")])
        resolution = build(inflation=[imf]).resolve(
            IndicatorRequest.for_countries(IndicatorKind.INFLATION, ["USA"])
        )
        assert resolution.payload["lastUpdated"] == "2025-06-15T12:00:00Z"


# ---------------------------------------------------------------------------
# Caching
# ---------------------------------------------------------------------------


class TestCaching:
    def test_repeat_request_is_idempotent(self, build, make_provider, usa_cop):
        imf = make_provider("imf", [inflation_record("USA", "United States", 2.9, 2025, "imf")])
        worldbank = make_provider(
            "worldbank", [inflation_record("COL", "Colombia", 9.3, 2024, "worldbank")]
        )
        orchestrator = build(inflation=[imf, worldbank])

        first = orchestrator.resolve(usa_cop)
        second = orchestrator.resolve(usa_cop)

        assert second.payload == first.payload
        assert second.cache_hit is True
        assert second.freshness.source == "cache"
        assert second.freshness.reliability == "medium"
        assert imf.fetch.call_count == 1

    def test_code_order_shares_entry(self, build, make_provider):
        imf = make_provider(
            "imf",
            [
                inflation_record("USA", "United States", 2.9, 2025, "imf"),
                inflation_record("KEN", "Kenya", 4.1, 2025, "imf"),
            ],
        )
        orchestrator = build(inflation=[imf])

        orchestrator.resolve(IndicatorRequest.for_countries(IndicatorKind.INFLATION, ["USA", "KEN"]))
        again = orchestrator.resolve(IndicatorRequest.for_countries(IndicatorKind.INFLATION, ["KEN", "USA"]))

        assert again.cache_hit is True
        assert imf.fetch.call_count == 1

    def test_ttl_expiry_refetches(self, build, make_provider, clock, usa_cop):
        imf = make_provider(
            "imf",
            [
                inflation_record("USA", "United States", 2.9, 2025, "imf"),
                inflation_record("COL", "Colombia", 5.0, 2025, "imf"),
            ],
        )
        orchestrator = build(inflation=[imf], ttls={IndicatorKind.INFLATION: timedelta(hours=1)})

        orchestrator.resolve(usa_cop)
        clock.advance(hours=2)
        resolution = orchestrator.resolve(usa_cop)

        assert resolution.cache_hit is False
        assert imf.fetch.call_count == 2

    def test_fallback_payload_expires_quickly(self, build, make_provider, clock, usa_cop):
        imf = make_provider("imf", error_kind=ProviderErrorKind.TIMEOUT)
        orchestrator = build(inflation=[imf])

        orchestrator.resolve(usa_cop)
        assert orchestrator.resolve(usa_cop).cache_hit is True

        clock.advance(minutes=6)
        assert orchestrator.resolve(usa_cop).cache_hit is False
        assert imf.fetch.call_count == 2

    def test_partially_filled_payload_expires_quickly(self, build, make_provider, clock, usa_cop):
        imf = make_provider("imf", [inflation_record("USA", "United States", 2.9, 2025, "imf")])
        worldbank = make_provider("worldbank", error_kind=ProviderErrorKind.TIMEOUT)
        orchestrator = build(inflation=[imf, worldbank])

        first = orchestrator.resolve(usa_cop)
        assert first.source == "imf"
        assert first.payload["countries"][1]["source"] == "fallback"

        worldbank.fetch.return_value = ProviderResult(
            provider="worldbank",
            records=[inflation_record("COL", "Colombia", 5.2, 2024, "worldbank")],
        )
        clock.advance(minutes=6)
        recovered = orchestrator.resolve(usa_cop)

        assert recovered.cache_hit is False
        assert recovered.payload["countries"][1]["source"] == "worldbank"

        clock.advance(days=3)
        assert orchestrator.resolve(usa_cop).cache_hit is True

    def test_concurrent_identical_requests_agree(self, build, make_provider, usa_cop):
        imf = make_provider(
            "imf",
            [
                inflation_record("USA", "United States", 2.9, 2025, "imf"),
                inflation_record("COL", "Colombia", 5.0, 2025, "imf"),
            ],
        )
        orchestrator = build(inflation=[imf])

        with ThreadPoolExecutor(max_workers=8) as executor:
            results = list(executor.map(lambda _: orchestrator.resolve(usa_cop), range(8)))

        assert all(r.payload == results[0].payload for r in results)
        assert len(orchestrator.cache) == 1


# ---------------------------------------------------------------------------
# Exchange rates
# ---------------------------------------------------------------------------


class TestExchangeRates:
    def test_unsupported_pair_skips_primary(self, build):
        session = Mock(spec=requests.Session)
        orchestrator = build(fx=[FrankfurterCollector(session=session)])

        resolution = orchestrator.resolve(IndicatorRequest.for_exchange_rate("USD", "KES"))

        session.get.assert_not_called()
        assert resolution.payload == {
            "rate": 130.0,
            "date": "2025-06-15",
            "source": "fallback",
            "from": "USD",
            "to": "KES",
        }

    def test_primary_answer(self, build, make_provider):
        frankfurter = make_provider(
            "frankfurter",
            [IndicatorRecord("USD/EUR", "EUR", 0.867, "frankfurter", date="2025-06-13")],
        )
        resolution = build(fx=[frankfurter]).resolve(IndicatorRequest.for_exchange_rate("USD", "EUR"))

        assert resolution.payload == {
            "rate": 0.867,
            "date": "2025-06-13",
            "source": "frankfurter",
            "from": "USD",
            "to": "EUR",
        }
        assert resolution.last_updated == datetime(2025, 6, 13, tzinfo=pytz.UTC)
        assert resolution.freshness.reliability == "high"

    def test_primary_failure_uses_cross_rate(self, build, make_provider):
        frankfurter = make_provider("frankfurter", error_kind=ProviderErrorKind.TIMEOUT)
        resolution = build(fx=[frankfurter]).resolve(IndicatorRequest.for_exchange_rate("USD", "EUR"))

        assert resolution.payload["source"] == "fallback"
        assert resolution.payload["rate"] == pytest.approx(0.92)

    def test_historical_fallback_series(self, build):
        orchestrator = build(fx=[FrankfurterCollector(session=Mock(spec=requests.Session))])

        payload = orchestrator.resolve(
            IndicatorRequest.for_exchange_rate("USD", "COP", historical=True)
        ).payload

        assert len(payload["dates"]) == 30
        assert len(payload["rates"]) == 30
        assert payload["source"] == "fallback"
        assert payload["to"] == "COP"

    def test_direction_not_shared_in_cache(self, build, make_provider):
        frankfurter = make_provider("frankfurter", error_kind=ProviderErrorKind.UNAVAILABLE)
        orchestrator = build(fx=[frankfurter])

        usd_eur = orchestrator.resolve(IndicatorRequest.for_exchange_rate("USD", "EUR"))
        eur_usd = orchestrator.resolve(IndicatorRequest.for_exchange_rate("EUR", "USD"))

        assert eur_usd.cache_hit is False
        assert eur_usd.payload["rate"] != usd_eur.payload["rate"]


# ---------------------------------------------------------------------------
# Macro
# ---------------------------------------------------------------------------


class TestMacro:
    def test_all_sub_indicators_time_out(self, build):
        session = macro_session()
        orchestrator = build(session=session)
        request = IndicatorRequest.for_countries(IndicatorKind.MACRO, ["KEN"])

        resolution = orchestrator.resolve(request)

        assert resolution.payload == {}
        assert resolution.source == "fallback"
        assert resolution.freshness.warning == WARNING_UNKNOWN
        assert session.get.call_count == 5

        orchestrator.resolve(request)
        assert session.get.call_count == 10

    def test_partial_sub_indicators_merge(self, build):
        gdp = [WB_META, [{"countryiso3code": "KEN", "date": "2023", "value": 5.61}]]
        rule_of_law = [WB_META, [{"countryiso3code": "KEN", "date": "2022", "value": 39.12}]]
        orchestrator = build(session=macro_session({"NY.GDP.MKTP.KD.ZG": gdp, "RL.PER": rule_of_law}))

        resolution = orchestrator.resolve(IndicatorRequest.for_countries(IndicatorKind.MACRO, ["KEN"]))

        assert resolution.source == "worldbank"
        assert resolution.payload == {
            "KEN": {
                "gdpGrowth": 5.6,
                "corruptionControl": None,
                "politicalStability": None,
                "ruleOfLaw": 39.1,
                "governmentEffectiveness": None,
                "year": 2023,
            }
        }

    def test_successful_payload_cached(self, build):
        gdp = [WB_META, [{"countryiso3code": "KEN", "date": "2023", "value": 5.6}]]
        session = macro_session({"NY.GDP.MKTP.KD.ZG": gdp})
        orchestrator = build(session=session)
        request = IndicatorRequest.for_countries(IndicatorKind.MACRO, ["KEN"])

        orchestrator.resolve(request)
        again = orchestrator.resolve(request)

        assert again.cache_hit is True
        assert session.get.call_count == 5


# ---------------------------------------------------------------------------
# Momentum
# ---------------------------------------------------------------------------


class TestMomentum:
    def test_all_upstreams_down(self, build, make_provider):
        momentum = [
            make_provider("defillama", error_kind=ProviderErrorKind.TIMEOUT),
            make_provider("alternative-me", error_kind=ProviderErrorKind.UNAVAILABLE),
        ]
        payload = build(momentum=momentum).resolve(IndicatorRequest.for_momentum()).payload

        assert payload["source"] == "proxy-fallback"
        assert payload["data"]["globalStablecoinCap"] == 162_400_000_000
        assert payload["data"]["marketSentiment"] == 65

    def test_fallback_timestamps_follow_clock(self, build, make_provider, clock):
        down = [make_provider("defillama", error_kind=ProviderErrorKind.TIMEOUT)]
        orchestrator = build(momentum=down, fx=[make_provider("frankfurter", error_kind=ProviderErrorKind.TIMEOUT)])
        clock.advance(days=40)

        momentum = orchestrator.resolve(IndicatorRequest.for_momentum())
        fx = orchestrator.resolve(IndicatorRequest.for_exchange_rate("USD", "EUR"))

        assert momentum.payload["data"]["lastUpdated"] == int(clock().timestamp() * 1000)
        assert momentum.freshness.age_in_hours == 0.0
        assert fx.payload["date"] == "2025-07-25"
        assert fx.freshness.age_in_hours == 12.0

    def test_one_upstream_answers(self, build, make_provider):
        chart = [
            {"totalCirculatingUSD": {"peggedUSD": 200.0}},
            {"totalCirculatingUSD": {"peggedUSD": 202.0}},
        ]
        momentum = [
            make_provider("defillama", [chart]),
            make_provider("alternative-me", error_kind=ProviderErrorKind.TIMEOUT),
        ]
        payload = build(momentum=momentum).resolve(IndicatorRequest.for_momentum()).payload

        assert payload["source"] == "live-aggregators-proxy"
        assert payload["data"]["globalStablecoinCap"] == 202.0
        assert payload["data"]["stablecoin24hChange"] == 1.0
        assert payload["data"]["marketSentiment"] == 50


# ---------------------------------------------------------------------------
# Direct fallback and health
# ---------------------------------------------------------------------------


class TestFallbackAndHealth:
    def test_direct_fallback_bypasses_providers(self, build, make_provider, usa_cop):
        imf = make_provider("imf", [inflation_record("USA", "United States", 2.9, 2025, "imf")])
        orchestrator = build(inflation=[imf])

        resolution = orchestrator.fallback(usa_cop)

        imf.fetch.assert_not_called()
        assert resolution.payload["source"] == "fallback"
        assert len(orchestrator.cache) == 0

    def test_direct_fallback_macro_is_empty(self, build):
        request = IndicatorRequest.for_countries(IndicatorKind.MACRO, ["KEN"])
        assert build().fallback(request).payload == {}

    def test_health_reports_every_provider(self, build, make_provider):
        orchestrator = build(
            inflation=[make_provider("imf"), make_provider("worldbank")],
            fx=[make_provider("frankfurter")],
            momentum=[make_provider("defillama")],
        )
        status = orchestrator.health()

        assert set(status) == {"imf", "worldbank", "frankfurter", "defillama", "worldbank-macro"}
        assert status["imf"] is True
        assert status["worldbank-macro"] is False
