"""Unit tests for the inflation normalizer (IMF, World Bank, StatBureau payloads)."""

import pytest

from src.ingestion.preprocessors.inflation_normalizer import InflationNormalizer
from src.shared.errors import ProviderError, ProviderErrorKind
from src.shared.models import IndicatorKind, IndicatorRequest

# ---------------------------------------------------------------------------
# Sample Data
# ---------------------------------------------------------------------------

SAMPLE_IMF = {
    "values": {
        "PCPIPCH": {
            "USA": {"2024": 2.94, "2025": 2.06, "2026": 2.1},
            "KEN": {"2024": 5.07},
            "ARG": {"2026": 45.33},
            "DEU": {"2025": 2.2},
        }
    }
}

SAMPLE_WORLDBANK = [
    {"page": 1, "pages": 1, "per_page": 100, "total": 5},
    [
        {"countryiso3code": "COL", "date": "2025", "value": None},
        {"countryiso3code": "COL", "date": "2024", "value": 9.28},
        {"countryiso3code": "COL", "date": "2023", "value": 11.74},
        {"countryiso3code": "USA", "date": "2024", "value": 2.95},
        {"countryiso3code": "", "date": "2024", "value": 4.1},
    ],
]


@pytest.fixture
def normalizer():
    return InflationNormalizer(current_year=2025)


def request_for(*codes):
    return IndicatorRequest.for_countries(IndicatorKind.INFLATION, list(codes))


# ---------------------------------------------------------------------------
# IMF
# ---------------------------------------------------------------------------


class TestIMF:
    def test_prefers_current_year(self, normalizer):
        records = normalizer.normalize(SAMPLE_IMF, request_for("USA"), "imf")
        assert len(records) == 1
        assert records[0].value == 2.1
        assert records[0].year == 2025
        assert records[0].country == "United States"
        assert records[0].source == "imf"

    def test_falls_back_to_previous_year(self, normalizer):
        records = normalizer.normalize(SAMPLE_IMF, request_for("KEN"), "imf")
        assert records[0].year == 2024
        assert records[0].value == 5.1

    def test_uses_forecast_as_last_resort(self, normalizer):
        records = normalizer.normalize(SAMPLE_IMF, request_for("ARG"), "imf")
        assert records[0].year == 2026
        assert records[0].value == 45.3

    def test_codes_absent_from_payload_are_skipped(self, normalizer):
        records = normalizer.normalize(SAMPLE_IMF, request_for("USA", "COL"), "imf")
        assert [r.code for r in records] == ["USA"]

    def test_only_requested_codes_returned(self, normalizer):
        records = normalizer.normalize(SAMPLE_IMF, request_for("DEU"), "imf")
        assert [r.code for r in records] == ["DEU"]

    def test_missing_indicator_is_malformed(self, normalizer):
        with pytest.raises(ProviderError) as exc_info:
            normalizer.normalize({"values": {}}, request_for("USA"), "imf")
        assert exc_info.value.kind is ProviderErrorKind.MALFORMED_RESPONSE
        assert exc_info.value.provider == "imf"


# ---------------------------------------------------------------------------
# World Bank
# ---------------------------------------------------------------------------


class TestWorldBank:
    def test_latest_non_null_year_per_country(self, normalizer):
        records = normalizer.normalize(SAMPLE_WORLDBANK, request_for("COL"), "worldbank")
        assert len(records) == 1
        assert records[0].code == "COL"
        assert records[0].country == "Colombia"
        assert records[0].year == 2024
        assert records[0].value == 9.3
        assert records[0].source == "worldbank"

    def test_filters_to_request(self, normalizer):
        records = normalizer.normalize(SAMPLE_WORLDBANK, request_for("USA", "COL"), "worldbank")
        assert {r.code for r in records} == {"USA", "COL"}

    def test_null_observations(self, normalizer):
        assert normalizer.normalize([{"page": 1}, None], request_for("USA"), "worldbank") == []

    def test_error_message_payload_is_malformed(self, normalizer):
        payload = [{"message": [{"id": "120", "value": "Invalid value"}]}]
        with pytest.raises(ProviderError) as exc_info:
            normalizer.normalize(payload, request_for("USA"), "worldbank")
        assert exc_info.value.kind is ProviderErrorKind.MALFORMED_RESPONSE


# ---------------------------------------------------------------------------
# StatBureau
# ---------------------------------------------------------------------------


class TestStatBureau:
    def test_array_payload(self, normalizer):
        raw = {"USA": [{"InflationRate": 3.24, "InflationRateRounded": 3.2}]}
        records = normalizer.normalize(raw, request_for("USA"), "statbureau")
        assert records[0].value == 3.2
        assert records[0].year == 2025
        assert records[0].source == "statbureau"

    def test_rounded_field_when_rate_missing(self, normalizer):
        raw = {"USA": [{"InflationRateRounded": "2.9"}]}
        assert normalizer.normalize(raw, request_for("USA"), "statbureau")[0].value == 2.9

    def test_object_payload(self, normalizer):
        raw = {"DEU": {"inflation_rate": "2.38"}}
        assert normalizer.normalize(raw, request_for("DEU"), "statbureau")[0].value == 2.4

    def test_bare_number(self, normalizer):
        raw = {"JPN": 1.87}
        assert normalizer.normalize(raw, request_for("JPN"), "statbureau")[0].value == 1.9

    def test_unusable_payload_skipped(self, normalizer):
        raw = {"USA": [{}], "DEU": {"note": "n/a"}}
        assert normalizer.normalize(raw, request_for("USA", "DEU"), "statbureau") == []


def test_unknown_source_rejected(normalizer):
    with pytest.raises(ValueError, match="Unknown inflation source"):
        normalizer.normalize({}, request_for("USA"), "tradingeconomics")
