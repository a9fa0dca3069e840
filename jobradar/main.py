"""FastAPI application factory with middleware, routers, and lifespan."""

import logging
import time
from contextlib import asynccontextmanager

import httpx
import redis
from fastapi import Depends, FastAPI, Request, Response
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
from uvicorn.middleware.proxy_headers import ProxyHeadersMiddleware

from .alerts.service import AlertStore
from .analysis.cache import AnalysisCache
from .analysis.llm import VacancyModelCaller
from .analysis.lookup import VacancyLookup
from .analysis.service import VacancyAnalyzer
from .config import Settings, settings, setup_logging
from .dependencies import get_store
from .errors import AppError, ErrorKind, classify_error
from .integrations.hh import HHClient
from .integrations.openrouter import OpenRouterClient
from .integrations.store import KeyValueStore, create_store
from .rate_limit import limiter

logger = logging.getLogger(__name__)

VERSION = "1.0.0"

_startup_time: float = 0.0


def build_services(app: FastAPI, store: KeyValueStore, http_client: httpx.AsyncClient, config: Settings) -> None:
    """Construct the long-lived components once and publish them on app.state."""
    openrouter = OpenRouterClient(config.openrouter_api_key, config.openrouter_base_url, http_client)
    model_caller = VacancyModelCaller(
        openrouter,
        config.effective_openrouter_model,
        max_tokens=config.analyze_max_tokens,
        timeout=config.analyze_timeout_seconds,
        retries=config.analyze_retries,
    )
    hh = HHClient(http_client, config.hh_base_url, config.hh_user_agent, config.hh_api_token)

    app.state.store = store
    app.state.hh = hh
    app.state.analyzer = VacancyAnalyzer(AnalysisCache(store, config.analyze_cache_ttl_seconds), model_caller)
    app.state.vacancy_lookup = VacancyLookup(store, hh)
    app.state.alert_store = AlertStore(store)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup/shutdown lifecycle."""
    global _startup_time
    _startup_time = time.time()

    setup_logging(settings)
    settings.validate_required()

    http_client = httpx.AsyncClient(timeout=30.0)
    store = create_store(settings.redis_url)
    build_services(app, store, http_client, settings)
    logger.info("jobradar started (model=%s)", settings.effective_openrouter_model)

    try:
        yield
    finally:
        await http_client.aclose()
        await store.aclose()


def _rate_limit_handler(request: Request, exc: RateLimitExceeded) -> Response:
    retry_after = "60"
    return JSONResponse(
        {"error": "RATE_LIMITED", "message": "Too many requests", "details": str(exc.detail)},
        status_code=429,
        headers={"Retry-After": retry_after},
    )


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="jobradar",
        version=VERSION,
        lifespan=lifespan,
    )

    # --- Exception handlers ---
    app.add_exception_handler(RateLimitExceeded, _rate_limit_handler)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        if any(e.get("type") == "json_invalid" for e in errors):
            return JSONResponse(
                {"error": "INVALID_JSON", "message": "Request body must be valid JSON"},
                status_code=400,
            )
        return JSONResponse(
            {
                "error": ErrorKind.INVALID_REQUEST.value,
                "message": "Invalid request payload",
                "details": jsonable_encoder(errors, custom_encoder={Exception: str}),
            },
            status_code=400,
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        kind = ErrorKind.NOT_FOUND.value if exc.status_code == 404 else "HTTP_ERROR"
        return JSONResponse({"error": kind, "message": str(exc.detail)}, status_code=exc.status_code)

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        error = classify_error(exc)
        logger.warning("%s %s failed: %s", request.method, request.url.path, error.message)
        return JSONResponse(error.to_dict(), status_code=error.status)

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception):
        error = classify_error(exc)
        logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
        return JSONResponse(error.to_dict(), status_code=error.status)

    # --- Middleware stack (LIFO: last added = outermost) ---

    app.state.limiter = limiter
    app.add_middleware(SlowAPIMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=False,
        allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    app.add_middleware(ProxyHeadersMiddleware, trusted_hosts=["*"])

    @app.middleware("http")
    async def security_headers(request: Request, call_next):
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        return response

    # --- API v1 (all JSON endpoints) ---
    from .api_v1 import api_v1_router

    app.include_router(api_v1_router)

    # --- Health check ---
    @app.get("/health")
    async def health(store: KeyValueStore = Depends(get_store)):
        redis_status = "ok"
        try:
            await store.ping()
        except (redis.RedisError, OSError):
            redis_status = "unreachable"

        status = "ok" if redis_status == "ok" else "degraded"
        uptime = round(time.time() - _startup_time, 1) if _startup_time else 0.0

        return {
            "status": status,
            "redis": redis_status,
            "version": VERSION,
            "uptime_seconds": uptime,
        }

    return app


app = create_app()
