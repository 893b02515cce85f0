"""Provider chain walker.

A chain is an ordered list of provider strategies (collectors). Walking it is
a pure function of the strategies' results: no caching, no catalog access.

States per request::

    NotStarted -> TryingProvider(0) -> ... -> TryingProvider(N-1)
        -> Success        (a provider returned >= 1 usable record)
        -> ExhaustionError (every provider failed, declined or returned nothing)

Providers are tried strictly one after another. In partial mode each provider
is only asked for the codes its predecessors did not resolve; the walk stops
once every code is resolved or the chain runs out, and succeeds if any
provider contributed a record.
"""

from dataclasses import dataclass, field, replace
from typing import Sequence

from src.ingestion.collectors.base_collector import BaseCollector
from src.shared.config import Config
from src.shared.errors import ExhaustionError, ProviderError
from src.shared.models import IndicatorRequest
from src.shared.utils import setup_logger

logger = setup_logger(__name__, level=Config.LOG_LEVEL)


@dataclass
class ChainOutcome:
    """Records gathered by a successful walk and which providers supplied them."""

    records: list = field(default_factory=list)
    sources: list[str] = field(default_factory=list)
    errors: list[ProviderError] = field(default_factory=list)

    @property
    def source(self) -> str:
        """Highest-priority provider that contributed records."""
        return self.sources[0]

    def missing(self, codes: Sequence[str]) -> list[str]:
        found = {getattr(record, "code", None) for record in self.records}
        return [code for code in codes if code not in found]


def walk_chain(
    strategies: Sequence[BaseCollector],
    request: IndicatorRequest,
    partial: bool = False,
) -> ChainOutcome:
    """Try ``strategies`` in order until one yields usable records.

    Args:
        strategies: Providers in priority order.
        request: Request to answer.
        partial: If True, keep walking with the unresolved codes after a
            provider answers only some of them.

    Returns:
        ChainOutcome with at least one record.

    Raises:
        ExhaustionError: If no provider produced any record.
    """
    outcome = ChainOutcome()
    pending = request

    for strategy in strategies:
        name = strategy.SOURCE_NAME
        if not strategy.supports(pending):
            logger.info("Skipping %s: request not supported", name)
            continue

        result = strategy.fetch(pending)
        if not result.ok:
            if result.error is not None:
                outcome.errors.append(result.error)
            else:
                logger.warning("%s returned no usable records", name)
            continue

        outcome.records.extend(result.records)
        outcome.sources.append(name)
        if not partial:
            return outcome

        remaining = outcome.missing(request.codes)
        if not remaining:
            return outcome
        logger.info("%s left %d codes unresolved: %s", name, len(remaining), ",".join(remaining))
        pending = replace(request, codes=tuple(remaining))

    if outcome.records:
        return outcome
    raise ExhaustionError(outcome.errors)
