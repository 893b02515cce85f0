"""Response normalizers: provider payloads to canonical records."""

from src.ingestion.preprocessors.base_preprocessor import BasePreprocessor
from src.ingestion.preprocessors.fx_normalizer import FXNormalizer
from src.ingestion.preprocessors.inflation_normalizer import InflationNormalizer
from src.ingestion.preprocessors.macro_normalizer import MacroNormalizer
from src.ingestion.preprocessors.momentum_normalizer import MomentumNormalizer

__all__ = [
    "BasePreprocessor",
    "FXNormalizer",
    "InflationNormalizer",
    "MacroNormalizer",
    "MomentumNormalizer",
]
