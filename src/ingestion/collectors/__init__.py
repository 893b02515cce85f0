"""Collectors package - one provider client per upstream data source."""

from src.ingestion.collectors.base_collector import BaseCollector
from src.ingestion.collectors.frankfurter_collector import FrankfurterCollector
from src.ingestion.collectors.imf_collector import IMFCollector
from src.ingestion.collectors.momentum_collector import DefiLlamaCollector, FearGreedCollector
from src.ingestion.collectors.statbureau_collector import StatBureauCollector
from src.ingestion.collectors.worldbank_collector import (
    WorldBankCollector,
    WorldBankMacroCollector,
)

__all__ = [
    "BaseCollector",
    "DefiLlamaCollector",
    "FearGreedCollector",
    "FrankfurterCollector",
    "IMFCollector",
    "StatBureauCollector",
    "WorldBankCollector",
    "WorldBankMacroCollector",
]
