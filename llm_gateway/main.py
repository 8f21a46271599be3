import logging
import traceback
from collections.abc import Iterable
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from llm_gateway.api.v1.router import api_v1_router
from llm_gateway.core.config import settings, validate_settings_for_production
from llm_gateway.core.exceptions import domain_error_handler, validation_error_handler
from llm_gateway.core.logging import setup_logging
from llm_gateway.core.metrics import PrometheusMiddleware, metrics_response
from llm_gateway.core.sentry import init_sentry
from llm_gateway.gateway.dispatcher import LlmGateway
from llm_gateway.gateway.errors import DomainError, KeyNotFoundError
from llm_gateway.gateway.key_store import EnvKeyStore, KeyStore
from llm_gateway.gateway.vendor_adapters import build_adapters

# Configure logging before anything else
setup_logging()

logger = logging.getLogger(__name__)


def build_gateway(provider_names: Iterable[str], key_store: KeyStore) -> LlmGateway:
    """Assemble the dispatcher once; raises KeyNotFoundError on a missing key."""
    return LlmGateway(build_adapters(provider_names, key_store))


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    validate_settings_for_production()
    init_sentry()
    logger.info("Starting LLM Gateway (providers=%s)", ", ".join(settings.enabled_provider_names))

    try:
        gateway = build_gateway(settings.enabled_provider_names, EnvKeyStore())
    except KeyNotFoundError as e:
        logger.error("Failed to initialize providers: %s (set %s)", e, EnvKeyStore.var_name(e.provider))
        raise SystemExit(1) from e

    app.state.gateway = gateway
    logger.info("LLM Gateway ready with %d models", len(gateway.list_models()))

    yield

    # Shutdown
    await gateway.aclose()
    logger.info("LLM Gateway shut down")


app = FastAPI(
    title="LLM Gateway",
    description="Provider-agnostic chat completion gateway",
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/api/docs" if settings.app_debug else None,
    redoc_url="/api/redoc" if settings.app_debug else None,
)


app.add_exception_handler(DomainError, domain_error_handler)
app.add_exception_handler(RequestValidationError, validation_error_handler)


# Log unhandled exceptions with full traceback
@app.exception_handler(Exception)
async def _unhandled_exception_handler(request: Request, exc: Exception):
    tb = traceback.format_exception(type(exc), exc, exc.__traceback__)
    logger.error("Unhandled %s on %s %s:\n%s", type(exc).__name__, request.method, request.url.path, "".join(tb))
    return JSONResponse(status_code=500, content={"error": f"{type(exc).__name__}: {exc}"})


app.add_middleware(PrometheusMiddleware)

# CORS: allowed_origins is comma-separated
_origins = [o.strip() for o in settings.allowed_origins.split(",") if o.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# API routes
app.include_router(api_v1_router)


@app.get("/api/v1/health")
async def health(request: Request):
    return {"status": "ok", **request.app.state.gateway.get_status()}


@app.get("/metrics", include_in_schema=False)
async def metrics():
    return metrics_response()
