"""Macro Data Normalizer - World Bank sub-indicator payloads to per-country records.

Merges the five independently fetched sub-indicators into one record per country:

    gdpGrowth               NY.GDP.MKTP.KD.ZG   GDP growth (annual %)
    corruptionControl       CC.PER              Control of Corruption, percentile rank
    politicalStability      PV.PER              Political Stability, percentile rank
    ruleOfLaw               RL.PER              Rule of Law, percentile rank
    governmentEffectiveness GE.PER              Government Effectiveness, percentile rank

Merge rules:
    - The World Bank returns observations most-recent-first; per country the first
      non-null value of each field is kept.
    - The record year is the largest year seen across all fields for that country.
    - Sub-indicators whose fetch failed are simply absent; their fields stay null.
    - Countries outside the request or the shared enumeration are dropped.

Example:
    >>> normalizer = MacroNormalizer()
    >>> records = normalizer.normalize({"gdpGrowth": wb_payload}, request, "worldbank")
    >>> records[0].to_dict()
    {'gdpGrowth': 5.6, 'corruptionControl': None, ..., 'year': 2023}
"""

from typing import Any

import pandas as pd

from src.ingestion.preprocessors.base_preprocessor import BasePreprocessor
from src.shared.countries import resolve_country
from src.shared.models import MACRO_FIELDS, IndicatorRequest, MacroRecord


class MacroNormalizer(BasePreprocessor):
    """Normalizer for World Bank growth and governance indicators."""

    CATEGORY = "macro"
    REQUIRED_COLUMNS = ["code", "field", "year", "value"]

    def normalize(
        self, raw: dict[str, Any], request: IndicatorRequest, source: str
    ) -> list[MacroRecord]:
        """Merge sub-indicator payloads into per-country records.

        Args:
            raw: Mapping of macro field name to that sub-indicator's World Bank
                payload. Failed sub-indicators may be missing or None.
            request: The macro request being answered.
            source: Source tag stamped on each record.

        Returns:
            One MacroRecord per country that has at least one non-null field,
            in request order.
        """
        frames = []
        for field in MACRO_FIELDS:
            payload = raw.get(field)
            items = self._observations(payload, field)
            if items:
                frames.append(self._field_frame(items, field))

        if not frames:
            return []

        df = pd.concat(frames, ignore_index=True)
        self.validate(df)
        df = df[df["code"].isin(request.codes)]
        if df.empty:
            return []

        # groupby(sort=False) + first() keeps the first (most recent) value per field
        values = df.groupby(["code", "field"], sort=False)["value"].first().unstack("field")
        years = df.groupby("code", sort=False)["year"].max()

        records = []
        for code in request.codes:
            if code not in values.index:
                continue
            row = values.loc[code]
            merged = {
                field: (round(float(row[field]), 1) if field in row.index and pd.notna(row[field]) else None)
                for field in MACRO_FIELDS
            }
            records.append(
                MacroRecord(code=code, values=merged, year=int(years.loc[code]), source=source)
            )

        self.logger.info(
            "Merged %d sub-indicators into %d country records", len(frames), len(records)
        )
        return records

    def _observations(self, payload: Any, field: str) -> list[dict]:
        if payload is None:
            return []
        if not isinstance(payload, list) or len(payload) < 2 or not isinstance(payload[1], list):
            self.logger.warning("Ignoring malformed %s payload", field)
            return []
        return [item for item in payload[1] if isinstance(item, dict)]

    def _field_frame(self, items: list[dict], field: str) -> pd.DataFrame:
        rows = []
        for item in items:
            country = resolve_country(item.get("countryiso3code") or "")
            if country is None:
                continue
            rows.append(
                {
                    "code": country.code,
                    "field": field,
                    "year": item.get("date"),
                    "value": item.get("value"),
                }
            )
        df = pd.DataFrame(rows, columns=self.REQUIRED_COLUMNS)
        df["value"] = pd.to_numeric(df["value"], errors="coerce")
        df["year"] = pd.to_numeric(df["year"], errors="coerce")
        return df.dropna(subset=["value", "year"])
