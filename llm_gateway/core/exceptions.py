"""HTTP mapping for gateway errors.

Each DomainError kind maps to exactly one status code; the response body is
always ``{"error": <message>}``. Malformed request bodies (422) use the same shape.
"""

import logging

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from llm_gateway.gateway.errors import (
    DomainError,
    InvalidRequestError,
    KeyNotFoundError,
    ModelNotFoundError,
    ProviderError,
    ProviderTimeoutError,
)

logger = logging.getLogger(__name__)


def error_status(exc: DomainError) -> tuple[int, str]:
    """Return ``(status_code, client message)`` for a gateway error."""
    if isinstance(exc, InvalidRequestError):
        return 400, exc.detail
    if isinstance(exc, ModelNotFoundError):
        return 404, f"model not found: {exc.model_id}"
    if isinstance(exc, KeyNotFoundError):
        return 500, f"API key not configured for {exc.provider}"
    if isinstance(exc, ProviderTimeoutError):
        return 504, "request timed out"
    if isinstance(exc, ProviderError):
        return 502, exc.detail
    return 500, str(exc)


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    status_code, message = error_status(exc)
    logger.error(
        "%s %s failed: %s",
        request.method,
        request.url.path,
        exc,
        extra={"error_code": exc.code, "status_code": status_code},
    )
    return JSONResponse(status_code=status_code, content={"error": message})


def validation_message(exc: RequestValidationError) -> str:
    """Flatten pydantic errors into ``loc: msg`` pairs, e.g. ``body.model: Field required``."""
    parts = [f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()]
    return "invalid request body: " + "; ".join(parts)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    message = validation_message(exc)
    logger.warning("%s %s rejected: %s", request.method, request.url.path, message)
    return JSONResponse(status_code=422, content={"error": message})
