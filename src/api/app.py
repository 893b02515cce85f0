"""FastAPI application factory.

The CacheStore, collectors and orchestrator are built once here, at process
startup, and shared with request handlers through ``app.state``. Tests pass
their own orchestrator (or override ``get_orchestrator``) instead.
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.api.routes import router
from src.cache.store import CacheStore
from src.fallback.catalog import StaticFallbackCatalog
from src.ingestion.collectors import (
    DefiLlamaCollector,
    FearGreedCollector,
    FrankfurterCollector,
    IMFCollector,
    StatBureauCollector,
    WorldBankCollector,
    WorldBankMacroCollector,
)
from src.orchestration.orchestrator import FallbackOrchestrator
from src.shared.config import Config
from src.shared.errors import ValidationError
from src.shared.utils import setup_logger

logger = setup_logger("src.api.app", level=Config.LOG_LEVEL)

DATA_HEADERS = [
    "X-Cache",
    "X-Data-Source",
    "X-Data-Last-Updated",
    "X-Data-Age-Hours",
    "X-Data-Fresh",
    "X-Data-Reliability",
    "X-Data-Quality",
    "X-Data-Warning",
]


def build_orchestrator(cache: CacheStore | None = None) -> FallbackOrchestrator:
    """Wire the production provider chains."""
    return FallbackOrchestrator(
        cache=cache or CacheStore(),
        catalog=StaticFallbackCatalog(),
        inflation_chain=[IMFCollector(), WorldBankCollector(), StatBureauCollector()],
        fx_chain=[FrankfurterCollector()],
        macro_collector=WorldBankMacroCollector(),
        momentum_collectors=[DefiLlamaCollector(), FearGreedCollector()],
    )


def create_app(orchestrator: FallbackOrchestrator | None = None) -> FastAPI:
    """Build the application.

    Raises:
        ValueError: If configuration is invalid.
        CatalogError: If the country/currency enumeration and the fallback
            catalog disagree.
    """
    Config.validate()
    StaticFallbackCatalog.validate(
        {FrankfurterCollector.SOURCE_NAME: FrankfurterCollector.SUPPORTED_CURRENCIES}
    )

    app = FastAPI(
        title="Macro Indicators API",
        description="Inflation, exchange rates, macro scores and stablecoin momentum with provider fallback",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET"],
        allow_headers=["*"],
        expose_headers=DATA_HEADERS,
    )
    app.state.orchestrator = orchestrator or build_orchestrator()

    _register_exception_handlers(app)
    app.include_router(router)

    logger.info("Macro Indicators API ready")
    return app


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError):
        logger.info("Rejected %s: %s", request.url.path, exc)
        return JSONResponse(status_code=400, content={"error": str(exc)})

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"error": "Invalid query parameters"})

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 405:
            return JSONResponse(status_code=405, content={"error": "Method not allowed"})
        return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception):
        logger.error("Unhandled error on %s", request.url.path, exc_info=exc)
        return JSONResponse(status_code=500, content={"error": "Internal server error"})
