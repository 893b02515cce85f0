"""StatBureau collector - tertiary inflation provider.

StatBureau is queried one country at a time by URL slug (``united-states``).
Countries without a slug in the shared enumeration are skipped. A failure for
one country does not stop the others; the call fails as a whole only when no
country could be fetched.
"""

from typing import Any

from src.ingestion.collectors.base_collector import BaseCollector
from src.ingestion.preprocessors.inflation_normalizer import InflationNormalizer
from src.shared.config import Config
from src.shared.countries import COUNTRIES
from src.shared.errors import ProviderError
from src.shared.models import IndicatorRecord, IndicatorRequest


class StatBureauCollector(BaseCollector):
    """Collector for StatBureau monthly inflation."""

    SOURCE_NAME = "statbureau"
    DEFAULT_TIMEOUT = Config.STATBUREAU_TIMEOUT

    def __init__(self, normalizer: InflationNormalizer | None = None, **kwargs) -> None:
        super().__init__(**kwargs)
        self.base_url = Config.STATBUREAU_URL
        self.normalizer = normalizer or InflationNormalizer()

    def supports(self, request: IndicatorRequest) -> bool:
        return any(self._slug(code) for code in request.codes)

    def collect(self, request: IndicatorRequest) -> list[IndicatorRecord]:
        raw: dict[str, Any] = {}
        last_error: ProviderError | None = None

        for code in request.codes:
            slug = self._slug(code)
            if not slug:
                continue
            try:
                raw[code] = self._get_json(self.base_url, params={"country": slug})
            except ProviderError as exc:
                self.logger.warning("StatBureau failed for %s: %s", code, exc)
                last_error = exc

        if not raw and last_error is not None:
            raise last_error
        return self.normalizer.normalize(raw, request, self.SOURCE_NAME)

    def health_check(self) -> bool:
        return self._ping(self.base_url, params={"country": "united-states"})

    @staticmethod
    def _slug(code: str) -> str | None:
        country = COUNTRIES.get(code)
        return country.statbureau_slug if country else None
