"""Exchange Rate Normalizer - Frankfurter payloads to canonical rate records.

Latest rate payload::

    {"amount": 1.0, "base": "USD", "date": "2024-05-03", "rates": {"EUR": 0.93}}

Time series payload::

    {"base": "USD", "start_date": "...", "rates": {"2024-05-02": {"EUR": 0.93}, ...}}

Rates keep full provider precision; only percentage indicators are rounded.
"""

from typing import Any

import pandas as pd

from src.ingestion.preprocessors.base_preprocessor import BasePreprocessor
from src.shared.models import IndicatorRecord, IndicatorRequest


class FXNormalizer(BasePreprocessor):
    """Normalizer for exchange rate quotes and short histories."""

    CATEGORY = "fx-rate"
    REQUIRED_COLUMNS = ["date", "value"]

    def normalize(self, raw: Any, request: IndicatorRequest, source: str) -> list[IndicatorRecord]:
        if not isinstance(raw, dict) or not isinstance(raw.get("rates"), dict):
            raise self.malformed(source, "missing rates object")

        if request.historical:
            return self._normalize_series(raw["rates"], request, source)
        return self._normalize_latest(raw, request, source)

    def _normalize_latest(self, raw: dict, request: IndicatorRequest, source: str) -> list[IndicatorRecord]:
        quote = request.codes[0]
        rate = raw["rates"].get(quote)
        if rate is None:
            raise self.malformed(source, f"no rate for {request.base}/{quote}")
        try:
            value = float(rate)
        except (TypeError, ValueError) as exc:
            raise self.malformed(source, f"non-numeric rate {rate!r}") from exc

        return [
            IndicatorRecord(
                country=f"{request.base}/{quote}",
                code=quote,
                value=value,
                source=source,
                date=raw.get("date"),
            )
        ]

    def _normalize_series(self, rates: dict, request: IndicatorRequest, source: str) -> list[IndicatorRecord]:
        quote = request.codes[0]
        if not rates:
            return []

        df = pd.DataFrame.from_dict(rates, orient="index")
        if quote not in df.columns:
            raise self.malformed(source, f"no {quote} column in time series")

        df = (
            df[[quote]]
            .rename(columns={quote: "value"})
            .rename_axis("date")
            .reset_index()
        )
        self.validate(df)
        df["value"] = pd.to_numeric(df["value"], errors="coerce")
        df = df.dropna(subset=["value"]).sort_values("date")

        return [
            IndicatorRecord(
                country=f"{request.base}/{quote}",
                code=quote,
                value=float(row.value),
                source=source,
                date=str(row.date),
            )
            for row in df.itertuples(index=False)
        ]
