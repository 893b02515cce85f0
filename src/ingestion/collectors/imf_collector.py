"""IMF DataMapper collector - primary inflation provider.

Fetches consumer price inflation (PCPIPCH, annual % change) for the previous,
current and next year in a single call; the next-year value is an IMF forecast.

API: https://www.imf.org/external/datamapper/api/help
"""

from src.ingestion.collectors.base_collector import BaseCollector
from src.ingestion.preprocessors.inflation_normalizer import InflationNormalizer
from src.shared.config import Config
from src.shared.models import IndicatorRecord, IndicatorRequest


class IMFCollector(BaseCollector):
    """Collector for IMF World Economic Outlook inflation figures."""

    SOURCE_NAME = "imf"
    DEFAULT_TIMEOUT = Config.IMF_TIMEOUT

    def __init__(self, normalizer: InflationNormalizer | None = None, **kwargs) -> None:
        super().__init__(**kwargs)
        self.base_url = Config.IMF_URL
        self.normalizer = normalizer or InflationNormalizer()

    def collect(self, request: IndicatorRequest) -> list[IndicatorRecord]:
        year = self.normalizer.current_year
        periods = ",".join(str(y) for y in (year - 1, year, year + 1))
        raw = self._get_json(self.base_url, params={"periods": periods})
        return self.normalizer.normalize(raw, request, self.SOURCE_NAME)

    def health_check(self) -> bool:
        return self._ping(self.base_url, params={"periods": str(self.normalizer.current_year)})
