"""Abstract base class for all response normalizers.

Enforces the canonical record contract:
- Codes resolved through the shared country/currency enumeration (unknown codes dropped)
- Percentage indicators rounded to one decimal place
- Every record tagged with the provider's source name
- At most one record per code (per date for time series)

Normalizers are pure: they receive a provider's decoded payload and return
records. Any shape they cannot interpret raises a MALFORMED_RESPONSE
ProviderError so the orchestrator can move on to the next provider.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

import pandas as pd

from src.shared.config import Config
from src.shared.errors import ProviderError, ProviderErrorKind
from src.shared.models import IndicatorRequest
from src.shared.utils import setup_logger


class BasePreprocessor(ABC):
    """Base class for all normalizers.

    Subclasses must define:
        CATEGORY (str): indicator family handled (e.g. "inflation", "macro").
        REQUIRED_COLUMNS (list[str]): columns the intermediate frame must carry.

    Subclasses must implement:
        normalize(): map a raw provider payload to canonical records.
    """

    CATEGORY: str
    REQUIRED_COLUMNS: list[str] = []

    def __init__(self, log_file: Path | None = None) -> None:
        """Initialize the normalizer.

        Args:
            log_file: Optional path for file-based logging.
        """
        self.logger = setup_logger(self.__class__.__name__, log_file, Config.LOG_LEVEL)

    @abstractmethod
    def normalize(self, raw: Any, request: IndicatorRequest, source: str) -> list:
        """Map one provider payload to canonical records.

        Args:
            raw: Decoded JSON payload as returned by the provider.
            request: The request the payload answers.
            source: Provider source tag to stamp on each record.

        Returns:
            List of records (possibly empty).

        Raises:
            ProviderError: If the payload does not have the provider's expected shape.
        """
        ...

    def validate(self, df: pd.DataFrame) -> bool:
        """Validate that an intermediate frame carries the required columns.

        Args:
            df: DataFrame to validate.

        Returns:
            True if valid.

        Raises:
            ValueError: If required columns are missing.
        """
        missing = [c for c in self.REQUIRED_COLUMNS if c not in df.columns]
        if missing:
            raise ValueError(f"{self.CATEGORY} frame missing columns: {missing}")
        return True

    def malformed(self, source: str, message: str) -> ProviderError:
        """Build (and log) a MALFORMED_RESPONSE error for ``source``."""
        self.logger.warning("Malformed %s payload from %s: %s", self.CATEGORY, source, message)
        return ProviderError(ProviderErrorKind.MALFORMED_RESPONSE, source, message)
