"""Read-only indicator endpoints.

Every endpoint answers HTTP 200 with a JSON body unless a query parameter is
missing or malformed (400). Provider failures never surface: the body's
``source`` field tells the caller which tier answered, and freshness metadata
travels in ``X-Data-*`` headers so cached bodies stay identical.
"""

import re

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse

from src.fallback.catalog import FALLBACK_SOURCE
from src.orchestration.orchestrator import FallbackOrchestrator, Resolution
from src.shared.config import Config
from src.shared.countries import PRIORITY_COUNTRIES, resolve_country
from src.shared.errors import ValidationError
from src.shared.models import IndicatorKind, IndicatorRequest
from src.shared.utils import setup_logger, utc_now

logger = setup_logger("src.api", level=Config.LOG_LEVEL)

router = APIRouter(prefix="/api", tags=["Macro indicators"])

CODE_PATTERN = re.compile(r"^[A-Z]{2,3}$")
TRUTHY = {"true", "1", "yes"}


def get_orchestrator(request: Request) -> FallbackOrchestrator:
    return request.app.state.orchestrator


def parse_codes(raw: str | None) -> list[str]:
    """Split a CSV ``countries`` parameter; an empty value means the default list.

    Raises:
        ValidationError: If any entry is not a 2-3 letter code.
    """
    codes = [part.strip().upper() for part in (raw or "").split(",") if part.strip()]
    if not codes:
        return list(PRIORITY_COUNTRIES)
    malformed = [code for code in codes if not CODE_PATTERN.match(code)]
    if malformed:
        raise ValidationError(f"Malformed country codes: {','.join(malformed)}")
    return codes


def _recognized(codes: list[str]) -> list[str]:
    return [code for code in codes if resolve_country(code) is not None]


def _respond(resolution: Resolution) -> JSONResponse:
    headers = resolution.freshness.to_headers()
    headers["X-Cache"] = "HIT" if resolution.cache_hit else "MISS"
    return JSONResponse(content=resolution.payload, headers=headers)


def _resolve_or_fallback(orchestrator: FallbackOrchestrator, request: IndicatorRequest) -> JSONResponse:
    try:
        resolution = orchestrator.resolve(request)
    except Exception:
        logger.exception("Unexpected failure resolving %s, serving fallback", request.cache_key)
        resolution = orchestrator.fallback(request)
    return _respond(resolution)


@router.get("/inflation", summary="Inflation rates by country")
def get_inflation(
    countries: str | None = None,
    orchestrator: FallbackOrchestrator = Depends(get_orchestrator),
):
    codes = _recognized(parse_codes(countries))
    if not codes:
        return JSONResponse(
            content={
                "countries": [],
                "source": FALLBACK_SOURCE,
                "lastUpdated": utc_now().isoformat().replace("+00:00", "Z"),
            }
        )
    request = IndicatorRequest.for_countries(IndicatorKind.INFLATION, codes)
    return _resolve_or_fallback(orchestrator, request)


@router.get("/exchange-rates", summary="Exchange rate, latest or last 30 days")
def get_exchange_rate(
    to: str | None = None,
    from_currency: str = Query("USD", alias="from"),
    historical: str | None = None,
    orchestrator: FallbackOrchestrator = Depends(get_orchestrator),
):
    if not to:
        raise ValidationError('Missing "to" currency parameter')
    request = IndicatorRequest.for_exchange_rate(
        from_currency, to, historical=(historical or "").lower() in TRUTHY
    )
    return _resolve_or_fallback(orchestrator, request)


@router.get("/macro", summary="GDP growth and governance scores by country")
def get_macro(
    countries: str | None = None,
    orchestrator: FallbackOrchestrator = Depends(get_orchestrator),
):
    codes = _recognized(parse_codes(countries))
    if not codes:
        return JSONResponse(content={})
    request = IndicatorRequest.for_countries(IndicatorKind.MACRO, codes)
    return _resolve_or_fallback(orchestrator, request)


@router.get("/finance/momentum", summary="Stablecoin market momentum")
def get_momentum(orchestrator: FallbackOrchestrator = Depends(get_orchestrator)):
    return _resolve_or_fallback(orchestrator, IndicatorRequest.for_momentum())


@router.get("/health", summary="Provider reachability")
def get_health(orchestrator: FallbackOrchestrator = Depends(get_orchestrator)):
    providers = orchestrator.health()
    return {"status": "ok" if all(providers.values()) else "degraded", "providers": providers}
