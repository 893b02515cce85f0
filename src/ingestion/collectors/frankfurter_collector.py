"""Frankfurter collector - primary exchange rate provider (ECB reference rates).

Only currencies published by the ECB are supported; requests naming any other
currency are declined up front so the orchestrator goes straight to the static
catalog without calling the API.

API: https://www.frankfurter.app/docs/
"""

from datetime import timedelta

from src.ingestion.collectors.base_collector import BaseCollector
from src.ingestion.preprocessors.fx_normalizer import FXNormalizer
from src.shared.config import Config
from src.shared.models import IndicatorRecord, IndicatorRequest
from src.shared.utils import utc_now


class FrankfurterCollector(BaseCollector):
    """Collector for latest and 30-day historical exchange rates."""

    SOURCE_NAME = "frankfurter"
    DEFAULT_TIMEOUT = Config.FRANKFURTER_TIMEOUT
    HISTORY_DAYS = 30

    SUPPORTED_CURRENCIES = frozenset(
        {
            "EUR", "USD", "GBP", "JPY", "CHF", "CAD", "AUD", "NZD", "SEK", "NOK", "DKK",
            "PLN", "CZK", "HUF", "RON", "BGN", "TRY", "BRL", "MXN", "SGD", "HKD", "KRW",
            "CNY", "INR", "IDR", "THB", "MYR", "PHP", "ILS", "ZAR",
        }
    )

    def __init__(
        self,
        normalizer: FXNormalizer | None = None,
        historical_timeout: float | None = None,
        **kwargs,
    ) -> None:
        super().__init__(**kwargs)
        self.base_url = Config.FRANKFURTER_URL.rstrip("/")
        self.historical_timeout = historical_timeout or Config.FRANKFURTER_HISTORICAL_TIMEOUT
        self.normalizer = normalizer or FXNormalizer()

    def supports(self, request: IndicatorRequest) -> bool:
        return request.base in self.SUPPORTED_CURRENCIES and all(
            code in self.SUPPORTED_CURRENCIES for code in request.codes
        )

    def collect(self, request: IndicatorRequest) -> list[IndicatorRecord]:
        params = {"from": request.base, "to": request.codes[0]}
        if request.historical:
            end = utc_now().date()
            start = end - timedelta(days=self.HISTORY_DAYS)
            url = f"{self.base_url}/{start.isoformat()}..{end.isoformat()}"
            raw = self._get_json(url, params=params, timeout=self.historical_timeout)
        else:
            raw = self._get_json(f"{self.base_url}/latest", params=params)
        return self.normalizer.normalize(raw, request, self.SOURCE_NAME)

    def health_check(self) -> bool:
        return self._ping(f"{self.base_url}/latest", params={"from": "USD", "to": "EUR"})
