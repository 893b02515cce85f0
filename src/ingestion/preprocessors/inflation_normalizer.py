"""Inflation Normalizer - provider payloads to canonical inflation records.

Supported sources:
    - imf: DataMapper API, year-keyed values per country
      ``{"values": {"PCPIPCH": {"USA": {"2024": 2.9, "2025": 2.1}}}}``
    - worldbank: indicator API, ``[meta, [ {countryiso3code, date, value}, ... ]]``
    - statbureau: per-country payloads keyed by ISO3 code

Selection policies:
    - IMF: current year, else previous year, else next-year forecast. The record
      year is the year whose value was actually used.
    - World Bank: per country, the observation with the largest year; null
      values are discarded.
    - StatBureau: first array item's InflationRate (then InflationRateRounded),
      else a top-level inflation_rate / value / rate field, else a bare number.

All values are rounded to one decimal place.
"""

from typing import Any

import pandas as pd

from src.ingestion.preprocessors.base_preprocessor import BasePreprocessor
from src.shared.countries import resolve_country
from src.shared.models import IndicatorRecord, IndicatorRequest
from src.shared.utils import round_one, utc_now


class InflationNormalizer(BasePreprocessor):
    """Normalizer for annual inflation rates (percent)."""

    CATEGORY = "inflation"
    REQUIRED_COLUMNS = ["code", "year", "value"]

    IMF_INDICATOR = "PCPIPCH"
    _STATBUREAU_FIELDS = ("inflation_rate", "value", "rate")

    def __init__(self, current_year: int | None = None, **kwargs) -> None:
        super().__init__(**kwargs)
        self._current_year = current_year

    @property
    def current_year(self) -> int:
        return self._current_year or utc_now().year

    def normalize(self, raw: Any, request: IndicatorRequest, source: str) -> list[IndicatorRecord]:
        if source == "imf":
            records = self._normalize_imf(raw, request)
        elif source == "worldbank":
            records = self._normalize_worldbank(raw, request)
        elif source == "statbureau":
            records = self._normalize_statbureau(raw, request)
        else:
            raise ValueError(f"Unknown inflation source: {source}")

        self.logger.debug("Normalized %d %s records from %s", len(records), self.CATEGORY, source)
        return records

    # ------------------------------------------------------------------
    # IMF
    # ------------------------------------------------------------------

    def _normalize_imf(self, raw: Any, request: IndicatorRequest) -> list[IndicatorRecord]:
        values = raw.get("values") if isinstance(raw, dict) else None
        series = values.get(self.IMF_INDICATOR) if isinstance(values, dict) else None
        if not isinstance(series, dict):
            raise self.malformed("imf", f"missing values.{self.IMF_INDICATOR}")

        year = self.current_year
        preference = (year, year - 1, year + 1)

        records = []
        for code in request.codes:
            by_year = series.get(code)
            if not isinstance(by_year, dict):
                continue
            for candidate in preference:
                value = by_year.get(str(candidate))
                if isinstance(value, (int, float)) and not isinstance(value, bool):
                    country = resolve_country(code)
                    records.append(
                        IndicatorRecord(
                            country=country.name if country else code,
                            code=code,
                            value=round_one(value),
                            year=candidate,
                            source="imf",
                        )
                    )
                    break
        return records

    # ------------------------------------------------------------------
    # World Bank
    # ------------------------------------------------------------------

    def _normalize_worldbank(self, raw: Any, request: IndicatorRequest) -> list[IndicatorRecord]:
        if not isinstance(raw, list) or len(raw) < 2:
            raise self.malformed("worldbank", "expected [metadata, observations]")
        items = raw[1]
        if items is None:
            return []
        if not isinstance(items, list):
            raise self.malformed("worldbank", "observations is not a list")

        df = self._worldbank_frame(items, request)
        if df.empty:
            return []

        # Most recent observation per country; stable sort keeps provider order on ties
        df = df.sort_values("year", ascending=False, kind="mergesort")
        latest = df.drop_duplicates(subset="code", keep="first")

        records = []
        for row in latest.itertuples(index=False):
            country = resolve_country(row.code)
            records.append(
                IndicatorRecord(
                    country=country.name,
                    code=country.code,
                    value=round_one(row.value),
                    year=int(row.year),
                    source="worldbank",
                )
            )
        return records

    def _worldbank_frame(self, items: list[dict], request: IndicatorRequest) -> pd.DataFrame:
        rows = [
            {
                "code": item.get("countryiso3code"),
                "year": item.get("date"),
                "value": item.get("value"),
            }
            for item in items
            if isinstance(item, dict)
        ]
        df = pd.DataFrame(rows, columns=self.REQUIRED_COLUMNS)
        self.validate(df)

        df["value"] = pd.to_numeric(df["value"], errors="coerce")
        df["year"] = pd.to_numeric(df["year"], errors="coerce")
        df = df.dropna(subset=["code", "year", "value"])
        return df[df["code"].isin(request.codes)]

    # ------------------------------------------------------------------
    # StatBureau
    # ------------------------------------------------------------------

    def _normalize_statbureau(self, raw: Any, request: IndicatorRequest) -> list[IndicatorRecord]:
        if not isinstance(raw, dict):
            raise self.malformed("statbureau", "expected mapping of code to payload")

        records = []
        for code in request.codes:
            if code not in raw:
                continue
            rate = self._extract_statbureau_rate(raw[code])
            if rate is None:
                self.logger.warning("No usable StatBureau rate for %s", code)
                continue
            country = resolve_country(code)
            records.append(
                IndicatorRecord(
                    country=country.name if country else code,
                    code=code,
                    value=round_one(rate),
                    year=self.current_year,
                    source="statbureau",
                )
            )
        return records

    def _extract_statbureau_rate(self, payload: Any) -> float | None:
        candidates: list[Any] = []
        if isinstance(payload, list) and payload:
            latest = payload[0]
            if isinstance(latest, dict):
                candidates = [latest.get("InflationRate"), latest.get("InflationRateRounded")]
        elif isinstance(payload, dict):
            candidates = [payload.get(name) for name in self._STATBUREAU_FIELDS]
        elif isinstance(payload, (int, float)) and not isinstance(payload, bool):
            candidates = [payload]

        for candidate in candidates:
            if candidate is None or candidate == "":
                continue
            try:
                value = float(candidate)
            except (TypeError, ValueError):
                continue
            if not pd.isna(value):
                return value
        return None
