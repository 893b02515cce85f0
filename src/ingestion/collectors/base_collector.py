"""Abstract base class for all provider collectors.

Enforces the provider client contract:
- ``fetch(request)`` never raises; every failure becomes a typed ProviderError
  inside the returned ProviderResult
- Every outbound call carries an explicit timeout; exceeding it yields TIMEOUT
  and aborts only that call
- Collectors hold no per-request state and may be shared across concurrent requests
- No retries: a failed call is reported immediately so the orchestrator can move on

Collectors are responsible ONLY for talking to their provider. Mapping raw
payloads to canonical records is delegated to a normalizer (preprocessors).
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

import requests

from src.shared.config import Config
from src.shared.errors import ProviderError, ProviderErrorKind
from src.shared.models import IndicatorRequest, ProviderResult
from src.shared.utils import setup_logger


class BaseCollector(ABC):
    """Base class for all provider collectors.

    Subclasses must define:
        SOURCE_NAME (str): source tag stamped on records (e.g. "imf", "worldbank").
        DEFAULT_TIMEOUT (float): per-call timeout in seconds.

    Subclasses must implement:
        collect(): fetch and normalize records, raising ProviderError on failure.
        health_check(): verify the source is reachable.
    """

    SOURCE_NAME: str
    DEFAULT_TIMEOUT: float = 8.0

    def __init__(
        self,
        session: requests.Session | None = None,
        timeout: float | None = None,
        log_file: Path | None = None,
    ) -> None:
        """Initialize the collector.

        Args:
            session: Optional shared HTTP session (a new one is created if omitted).
            timeout: Per-call timeout in seconds (defaults to DEFAULT_TIMEOUT).
            log_file: Optional path for file-based logging.
        """
        self.timeout = timeout or self.DEFAULT_TIMEOUT
        self._session = session or self._create_session()
        self.logger = setup_logger(self.__class__.__name__, log_file, Config.LOG_LEVEL)

    # ------------------------------------------------------------------
    # Provider contract
    # ------------------------------------------------------------------

    def supports(self, request: IndicatorRequest) -> bool:
        """Whether this provider can answer ``request`` at all."""
        return True

    def fetch(self, request: IndicatorRequest) -> ProviderResult:
        """Fetch normalized records for ``request`` without raising.

        Returns:
            ProviderResult with records on success, or with a typed error.
        """
        try:
            records = self.collect(request)
        except ProviderError as exc:
            self.logger.warning("%s failed (%s): %s", self.SOURCE_NAME, exc.kind.value, exc.message)
            return ProviderResult.failure(exc)
        except Exception as exc:
            self.logger.exception("Unexpected error in %s collector", self.SOURCE_NAME)
            return ProviderResult.failure(
                ProviderError(ProviderErrorKind.UNAVAILABLE, self.SOURCE_NAME, str(exc))
            )

        self.logger.info("%s returned %d records", self.SOURCE_NAME, len(records))
        return ProviderResult(provider=self.SOURCE_NAME, records=records)

    @abstractmethod
    def collect(self, request: IndicatorRequest) -> list:
        """Fetch and normalize records for ``request``.

        Raises:
            ProviderError: On network failure, timeout, rate limiting or bad payloads.
        """
        ...

    @abstractmethod
    def health_check(self) -> bool:
        """Verify the data source is reachable and responding.

        Returns:
            True if the source is available, False otherwise.
        """
        ...

    # ------------------------------------------------------------------
    # HTTP layer
    # ------------------------------------------------------------------

    def _create_session(self) -> requests.Session:
        session = requests.Session()
        session.headers.update({"Accept": "application/json", "User-Agent": Config.USER_AGENT})
        return session

    def _get_json(
        self,
        url: str,
        params: dict[str, Any] | None = None,
        timeout: float | None = None,
    ) -> Any:
        """GET ``url`` and decode the JSON body, mapping failures to ProviderError.

        Raises:
            ProviderError: TIMEOUT, RATE_LIMITED (HTTP 429), UNAVAILABLE (network or
                other HTTP errors) or MALFORMED_RESPONSE (undecodable body).
        """
        self.logger.debug("GET %s params=%s", url, params)
        try:
            response = self._session.get(url, params=params, timeout=timeout or self.timeout)
        except requests.exceptions.Timeout as exc:
            raise ProviderError(ProviderErrorKind.TIMEOUT, self.SOURCE_NAME, str(exc)) from exc
        except requests.exceptions.RequestException as exc:
            raise ProviderError(ProviderErrorKind.UNAVAILABLE, self.SOURCE_NAME, str(exc)) from exc

        if response.status_code == 429:
            raise ProviderError(ProviderErrorKind.RATE_LIMITED, self.SOURCE_NAME, "HTTP 429")
        if not response.ok:
            raise ProviderError(
                ProviderErrorKind.UNAVAILABLE, self.SOURCE_NAME, f"HTTP {response.status_code}"
            )

        try:
            return response.json()
        except ValueError as exc:
            raise ProviderError(
                ProviderErrorKind.MALFORMED_RESPONSE, self.SOURCE_NAME, "invalid JSON body"
            ) from exc

    def _ping(self, url: str, params: dict[str, Any] | None = None) -> bool:
        try:
            return self._session.get(url, params=params, timeout=min(self.timeout, 5)).ok
        except requests.exceptions.RequestException as exc:
            self.logger.error("%s health check failed: %s", self.SOURCE_NAME, exc)
            return False
