"""Market momentum collectors.

- DefiLlamaCollector: aggregate stablecoin circulating supply chart.
- FearGreedCollector: alternative.me crypto Fear & Greed index.

Both return raw payloads as a single-element record list; the orchestrator
fetches them concurrently and MomentumNormalizer combines the two.
"""

from typing import Any

from src.ingestion.collectors.base_collector import BaseCollector
from src.shared.config import Config
from src.shared.errors import ProviderError, ProviderErrorKind
from src.shared.models import IndicatorRequest


class DefiLlamaCollector(BaseCollector):
    """Collector for total stablecoin market capitalization."""

    SOURCE_NAME = "defillama"
    DEFAULT_TIMEOUT = Config.DEFILLAMA_TIMEOUT

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self.url = Config.DEFILLAMA_URL

    def collect(self, request: IndicatorRequest) -> list[Any]:
        raw = self._get_json(self.url)
        if not isinstance(raw, list):
            raise ProviderError(
                ProviderErrorKind.MALFORMED_RESPONSE, self.SOURCE_NAME, "expected a list of chart points"
            )
        return [raw] if raw else []

    def health_check(self) -> bool:
        return self._ping(self.url)


class FearGreedCollector(BaseCollector):
    """Collector for the crypto market sentiment index (0-100)."""

    SOURCE_NAME = "alternative-me"
    DEFAULT_TIMEOUT = Config.FEAR_GREED_TIMEOUT

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self.url = Config.FEAR_GREED_URL

    def collect(self, request: IndicatorRequest) -> list[Any]:
        raw = self._get_json(self.url)
        if not isinstance(raw, dict) or not raw.get("data"):
            raise ProviderError(
                ProviderErrorKind.MALFORMED_RESPONSE, self.SOURCE_NAME, "missing data array"
            )
        return [raw]

    def health_check(self) -> bool:
        return self._ping(self.url)
