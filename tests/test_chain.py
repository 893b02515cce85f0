"""Tests for the provider chain walker."""

import pytest

from src.orchestration.chain import walk_chain
from src.shared.errors import ExhaustionError, ProviderErrorKind
from src.shared.models import IndicatorKind, IndicatorRecord, IndicatorRequest


def record(code, source, value=1.0):
    return IndicatorRecord(country=code, code=code, value=value, source=source, year=2025)


@pytest.fixture
def usa_col():
    return IndicatorRequest.for_countries(IndicatorKind.INFLATION, ["USA", "COL"])


class TestSequentialWalk:
    def test_first_success_short_circuits(self, make_provider, usa_col):
        imf = make_provider("imf", [record("USA", "imf"), record("COL", "imf")])
        worldbank = make_provider("worldbank", [record("USA", "worldbank")])

        outcome = walk_chain([imf, worldbank], usa_col)

        assert outcome.source == "imf"
        worldbank.fetch.assert_not_called()

    def test_failure_moves_to_next(self, make_provider, usa_col):
        imf = make_provider("imf", error_kind=ProviderErrorKind.TIMEOUT)
        worldbank = make_provider("worldbank", [record("USA", "worldbank")])

        outcome = walk_chain([imf, worldbank], usa_col)

        assert outcome.source == "worldbank"
        assert [e.provider for e in outcome.errors] == ["imf"]

    def test_empty_result_moves_to_next(self, make_provider, usa_col):
        imf = make_provider("imf", [])
        worldbank = make_provider("worldbank", [record("USA", "worldbank")])
        assert walk_chain([imf, worldbank], usa_col).source == "worldbank"

    def test_unsupported_provider_is_not_called(self, make_provider, usa_col):
        statbureau = make_provider("statbureau", [record("USA", "statbureau")], supports=False)
        worldbank = make_provider("worldbank", [record("USA", "worldbank")])

        outcome = walk_chain([statbureau, worldbank], usa_col)

        statbureau.fetch.assert_not_called()
        assert outcome.source == "worldbank"

    def test_exhaustion(self, make_provider, usa_col):
        providers = [
            make_provider("imf", error_kind=ProviderErrorKind.TIMEOUT),
            make_provider("worldbank", error_kind=ProviderErrorKind.RATE_LIMITED),
            make_provider("statbureau", []),
        ]
        with pytest.raises(ExhaustionError) as exc_info:
            walk_chain(providers, usa_col)
        assert [e.kind for e in exc_info.value.errors] == [
            ProviderErrorKind.TIMEOUT,
            ProviderErrorKind.RATE_LIMITED,
        ]

    def test_empty_chain(self, usa_col):
        with pytest.raises(ExhaustionError):
            walk_chain([], usa_col)


class TestPartialWalk:
    def test_next_provider_only_gets_unresolved_codes(self, make_provider, usa_col):
        imf = make_provider("imf", [record("USA", "imf")])
        worldbank = make_provider("worldbank", [record("COL", "worldbank")])
        statbureau = make_provider("statbureau", [record("COL", "statbureau")])

        outcome = walk_chain([imf, worldbank, statbureau], usa_col, partial=True)

        assert worldbank.fetch.call_args[0][0].codes == ("COL",)
        statbureau.fetch.assert_not_called()
        assert outcome.sources == ["imf", "worldbank"]
        assert outcome.source == "imf"
        assert outcome.missing(usa_col.codes) == []

    def test_supports_checked_against_narrowed_request(self, make_provider, usa_col):
        imf = make_provider("imf", [record("USA", "imf")])
        worldbank = make_provider("worldbank", error_kind=ProviderErrorKind.UNAVAILABLE)
        statbureau = make_provider("statbureau", supports=False)

        outcome = walk_chain([imf, worldbank, statbureau], usa_col, partial=True)

        assert statbureau.supports.call_args[0][0].codes == ("COL",)
        assert outcome.missing(usa_col.codes) == ["COL"]
        assert outcome.source == "imf"

    def test_partial_exhaustion(self, make_provider, usa_col):
        imf = make_provider("imf", error_kind=ProviderErrorKind.TIMEOUT)
        with pytest.raises(ExhaustionError):
            walk_chain([imf], usa_col, partial=True)

    def test_later_provider_fills_when_first_fails(self, make_provider, usa_col):
        imf = make_provider("imf", error_kind=ProviderErrorKind.MALFORMED_RESPONSE)
        worldbank = make_provider("worldbank", [record("USA", "worldbank"), record("COL", "worldbank")])

        outcome = walk_chain([imf, worldbank], usa_col, partial=True)

        assert worldbank.fetch.call_args[0][0].codes == ("USA", "COL")
        assert outcome.source == "worldbank"
