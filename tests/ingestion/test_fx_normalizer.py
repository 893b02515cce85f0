"""Unit tests for the exchange rate normalizer."""

import pytest

from src.ingestion.preprocessors.fx_normalizer import FXNormalizer
from src.shared.errors import ProviderError, ProviderErrorKind
from src.shared.models import IndicatorRequest

SAMPLE_LATEST = {"amount": 1.0, "base": "USD", "date": "2025-06-13", "rates": {"EUR": 0.86714}}

SAMPLE_SERIES = {
    "amount": 1.0,
    "base": "USD",
    "start_date": "2025-06-11",
    "end_date": "2025-06-13",
    "rates": {
        "2025-06-13": {"EUR": 0.867},
        "2025-06-11": {"EUR": 0.875},
        "2025-06-12": {"EUR": 0.871},
    },
}


@pytest.fixture
def normalizer():
    return FXNormalizer()


class TestLatest:
    def test_keeps_full_precision(self, normalizer):
        request = IndicatorRequest.for_exchange_rate("USD", "EUR")
        records = normalizer.normalize(SAMPLE_LATEST, request, "frankfurter")
        assert len(records) == 1
        assert records[0].value == 0.86714
        assert records[0].date == "2025-06-13"
        assert records[0].country == "USD/EUR"
        assert records[0].code == "EUR"
        assert records[0].source == "frankfurter"

    def test_missing_quote_is_malformed(self, normalizer):
        request = IndicatorRequest.for_exchange_rate("USD", "GBP")
        with pytest.raises(ProviderError) as exc_info:
            normalizer.normalize(SAMPLE_LATEST, request, "frankfurter")
        assert exc_info.value.kind is ProviderErrorKind.MALFORMED_RESPONSE

    def test_missing_rates_is_malformed(self, normalizer):
        request = IndicatorRequest.for_exchange_rate("USD", "EUR")
        with pytest.raises(ProviderError):
            normalizer.normalize({"message": "not found"}, request, "frankfurter")


class TestSeries:
    def test_sorted_by_date(self, normalizer):
        request = IndicatorRequest.for_exchange_rate("USD", "EUR", historical=True)
        records = normalizer.normalize(SAMPLE_SERIES, request, "frankfurter")
        assert [r.date for r in records] == ["2025-06-11", "2025-06-12", "2025-06-13"]
        assert [r.value for r in records] == [0.875, 0.871, 0.867]

    def test_missing_column_is_malformed(self, normalizer):
        request = IndicatorRequest.for_exchange_rate("USD", "GBP", historical=True)
        with pytest.raises(ProviderError):
            normalizer.normalize(SAMPLE_SERIES, request, "frankfurter")

    def test_empty_series(self, normalizer):
        request = IndicatorRequest.for_exchange_rate("USD", "EUR", historical=True)
        assert normalizer.normalize({"rates": {}}, request, "frankfurter") == []
