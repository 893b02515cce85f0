"""Provider chain walking and fallback orchestration."""

from src.orchestration.chain import ChainOutcome, walk_chain
from src.orchestration.orchestrator import FallbackOrchestrator, Resolution

__all__ = ["ChainOutcome", "FallbackOrchestrator", "Resolution", "walk_chain"]
