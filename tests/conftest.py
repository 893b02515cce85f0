"""
Root pytest configuration.

Provides a controllable clock and a factory for mock provider strategies so
orchestration tests can script provider outcomes without any network access.
"""

from datetime import datetime, timedelta
from unittest.mock import Mock

import pytest
import pytz

from src.ingestion.collectors.base_collector import BaseCollector
from src.shared.errors import ProviderError
from src.shared.models import ProviderResult

FIXED_NOW = datetime(2025, 6, 15, 12, 0, 0, tzinfo=pytz.UTC)


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime = FIXED_NOW) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def make_provider():
    """Build a Mock collector that answers every fetch with fixed records or an error."""

    def _make(name, records=None, error_kind=None, supports=True):
        provider = Mock(spec=BaseCollector)
        provider.SOURCE_NAME = name
        provider.supports.return_value = supports
        provider.health_check.return_value = True
        if error_kind is not None:
            provider.fetch.return_value = ProviderResult.failure(
                ProviderError(error_kind, name, "simulated failure")
            )
        else:
            provider.fetch.return_value = ProviderResult(provider=name, records=list(records or []))
        return provider

    return _make
