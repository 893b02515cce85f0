"""World Bank Indicators API collectors.

- WorldBankCollector: secondary inflation provider (FP.CPI.TOTL.ZG, last 3 years).
- WorldBankMacroCollector: GDP growth and Worldwide Governance Indicators. Each
  of the five sub-indicators is a separate call so the orchestrator can fan
  them out in parallel; ``fetch`` runs them sequentially for direct use.

API: https://datahelpdesk.worldbank.org/knowledgebase/articles/889392
"""

from dataclasses import dataclass
from typing import Any

from src.ingestion.collectors.base_collector import BaseCollector
from src.ingestion.preprocessors.inflation_normalizer import InflationNormalizer
from src.ingestion.preprocessors.macro_normalizer import MacroNormalizer
from src.shared.config import Config
from src.shared.errors import ProviderError
from src.shared.models import (
    MACRO_FIELDS,
    IndicatorRecord,
    IndicatorRequest,
    MacroRecord,
    ProviderResult,
)
from src.shared.utils import utc_now


@dataclass(frozen=True)
class WorldBankIndicator:
    """Immutable descriptor for a World Bank indicator series."""

    field: str
    indicator_id: str
    source_id: int  # 2 = World Development Indicators, 3 = Worldwide Governance Indicators
    description: str


class WorldBankBaseCollector(BaseCollector):
    """Shared World Bank endpoint handling for the inflation and macro collectors."""

    SOURCE_NAME = "worldbank"

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self.base_url = Config.WORLD_BANK_URL

    def health_check(self) -> bool:
        return self._ping(f"{self.base_url}/country/USA", params={"format": "json"})

    def _indicator_url(self, codes: tuple[str, ...], indicator_id: str) -> str:
        return f"{self.base_url}/country/{';'.join(codes)}/indicator/{indicator_id}"


class WorldBankCollector(WorldBankBaseCollector):
    """Collector for World Bank annual CPI inflation."""

    DEFAULT_TIMEOUT = Config.WORLD_BANK_TIMEOUT

    INFLATION_INDICATOR = "FP.CPI.TOTL.ZG"
    PER_PAGE = 100

    def __init__(self, normalizer: InflationNormalizer | None = None, **kwargs) -> None:
        super().__init__(**kwargs)
        self.normalizer = normalizer or InflationNormalizer()

    def collect(self, request: IndicatorRequest) -> list[IndicatorRecord]:
        year = self.normalizer.current_year
        raw = self._get_json(
            self._indicator_url(request.codes, self.INFLATION_INDICATOR),
            params={"format": "json", "per_page": self.PER_PAGE, "date": f"{year - 2}:{year}"},
        )
        return self.normalizer.normalize(raw, request, self.SOURCE_NAME)


class WorldBankMacroCollector(WorldBankBaseCollector):
    """Collector for growth and governance percentile ranks."""

    DEFAULT_TIMEOUT = Config.WORLD_BANK_MACRO_TIMEOUT
    PER_PAGE = 1000
    YEARS_BACK = 3

    INDICATORS: tuple[WorldBankIndicator, ...] = (
        WorldBankIndicator("gdpGrowth", "NY.GDP.MKTP.KD.ZG", 2, "GDP growth (annual %)"),
        WorldBankIndicator("corruptionControl", "CC.PER", 3, "Control of Corruption: Percentile Rank"),
        WorldBankIndicator("politicalStability", "PV.PER", 3, "Political Stability: Percentile Rank"),
        WorldBankIndicator("ruleOfLaw", "RL.PER", 3, "Rule of Law: Percentile Rank"),
        WorldBankIndicator("governmentEffectiveness", "GE.PER", 3, "Government Effectiveness: Percentile Rank"),
    )

    def __init__(self, macro_normalizer: MacroNormalizer | None = None, **kwargs) -> None:
        super().__init__(**kwargs)
        self.macro_normalizer = macro_normalizer or MacroNormalizer()
        self._by_field = {ind.field: ind for ind in self.INDICATORS}

    def fetch_indicator(self, request: IndicatorRequest, field: str) -> ProviderResult:
        """Fetch one sub-indicator's raw payload without raising.

        Returns:
            ProviderResult whose single record is the raw World Bank payload,
            or a typed error if the call failed or timed out.
        """
        try:
            raw = self._get_indicator(request, field)
        except ProviderError as exc:
            self.logger.warning("Sub-indicator %s failed (%s): %s", field, exc.kind.value, exc.message)
            return ProviderResult.failure(exc)
        return ProviderResult(provider=self.SOURCE_NAME, records=[raw])

    def collect(self, request: IndicatorRequest) -> list[MacroRecord]:
        raw: dict[str, Any] = {}
        errors: list[ProviderError] = []
        for field in MACRO_FIELDS:
            try:
                raw[field] = self._get_indicator(request, field)
            except ProviderError as exc:
                self.logger.warning("Sub-indicator %s failed: %s", field, exc)
                errors.append(exc)
        if len(errors) == len(MACRO_FIELDS):
            raise errors[-1]
        return self.merge(raw, request)

    def merge(self, raw: dict[str, Any], request: IndicatorRequest) -> list[MacroRecord]:
        """Merge sub-indicator payloads (missing ones allowed) into records."""
        return self.macro_normalizer.normalize(raw, request, self.SOURCE_NAME)

    def _get_indicator(self, request: IndicatorRequest, field: str) -> Any:
        indicator = self._by_field[field]
        year = utc_now().year
        return self._get_json(
            self._indicator_url(request.codes, indicator.indicator_id),
            params={
                "format": "json",
                "per_page": self.PER_PAGE,
                "date": f"{year - self.YEARS_BACK}:{year}",
                "source": indicator.source_id,
            },
        )
