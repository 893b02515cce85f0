"""Data ingestion module - provider collectors and response normalizers."""

from src.ingestion.collectors import (
    BaseCollector,
    DefiLlamaCollector,
    FearGreedCollector,
    FrankfurterCollector,
    IMFCollector,
    StatBureauCollector,
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
