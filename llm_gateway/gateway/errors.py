"""Error taxonomy shared by the dispatcher and every vendor adapter.

Only these five exceptions cross component boundaries. Adapters convert
httpx / parsing failures into one of them before raising; the REST layer
maps each ``code`` to an HTTP status.
"""

from __future__ import annotations


class DomainError(Exception):
    """Base class for all gateway errors."""

    code: str = "domain_error"


class InvalidRequestError(DomainError):
    """The request is malformed (e.g. no messages, unknown role)."""

    code = "invalid_request"

    def __init__(self, detail: str):
        super().__init__(f"invalid request: {detail}")
        self.detail = detail


class ModelNotFoundError(DomainError):
    """No registered adapter declares the requested model."""

    code = "model_not_found"

    def __init__(self, model_id: str):
        super().__init__(f"model not found: {model_id}")
        self.model_id = model_id


class KeyNotFoundError(DomainError):
    """No API key is available for a provider."""

    code = "key_not_found"

    def __init__(self, provider: str):
        super().__init__(f"API key not found for provider: {provider}")
        self.provider = provider


class ProviderError(DomainError):
    """The upstream vendor failed or answered with something unusable."""

    code = "provider_error"

    def __init__(self, detail: str, status_code: int | None = None):
        super().__init__(f"provider error: {detail}")
        self.detail = detail
        self.status_code = status_code


class ProviderTimeoutError(DomainError):
    """The upstream call did not complete in time."""

    code = "timeout"

    def __init__(self, detail: str = ""):
        super().__init__("request timed out")
        self.detail = detail
