"""Vendor-Specific Adapters: protocol-level handling for each LLM vendor.

Each adapter translates a CompletionRequest into the vendor's HTTP protocol,
sends it, and returns a CompletionResponse. Every failure leaves the adapter
as one of the DomainError kinds; httpx and pydantic errors never escape.

Vendor-specific behaviors:
  - OpenAI: Chat Completions, system prompts sent as "developer"
  - DeepSeek: OpenAI-compatible, classic "system" role, slower default timeout
  - Perplexity: OpenAI-compatible, classic "system" role
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from collections.abc import Iterable

import httpx
from pydantic import BaseModel, Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from llm_gateway.gateway.errors import ProviderError, ProviderTimeoutError
from llm_gateway.gateway.key_store import KeyStore
from llm_gateway.gateway.types import (
    ChatMessage,
    Choice,
    CompletionRequest,
    CompletionResponse,
    ModelInfo,
    Role,
    Usage,
)

logger = logging.getLogger(__name__)


class BaseVendorAdapter(ABC):
    """Base class for all vendor adapters.

    Subclasses set ``name`` (used in ModelInfo.provider and logs) and
    implement ``complete`` and ``models``.
    """

    name: str

    @abstractmethod
    async def complete(self, request: CompletionRequest) -> CompletionResponse:
        """Send a request to the vendor and return a normalized response."""
        ...

    @abstractmethod
    def models(self) -> list[ModelInfo]:
        """Static catalog of models this vendor serves."""
        ...

    async def aclose(self) -> None:
        """Release network resources. No-op by default."""
        return None


# ---------------------------------------------------------------------------
# Role tables
# ---------------------------------------------------------------------------

# OpenAI recommends "developer" for system instructions on current models
OPENAI_ROLE_MAP: dict[Role, str] = {
    Role.SYSTEM: "developer",
    Role.USER: "user",
    Role.ASSISTANT: "assistant",
    Role.TOOL: "tool",
}

# Compatible vendors that still expect the classic role names
CLASSIC_ROLE_MAP: dict[Role, str] = {
    Role.SYSTEM: "system",
    Role.USER: "user",
    Role.ASSISTANT: "assistant",
    Role.TOOL: "tool",
}

# Inverse table plus legacy aliases ("function" is deprecated but still seen)
_INBOUND_ROLES: dict[str, Role] = {
    "system": Role.SYSTEM,
    "developer": Role.SYSTEM,
    "user": Role.USER,
    "assistant": Role.ASSISTANT,
    "tool": Role.TOOL,
    "function": Role.TOOL,
}


def role_from_vendor(value: str) -> Role:
    """Map a vendor role string back to a Role.

    Unknown strings fall back to USER with a warning instead of failing the
    whole response.
    """
    role = _INBOUND_ROLES.get(value)
    if role is None:
        logger.warning("Unknown vendor role %r, falling back to user", value)
        return Role.USER
    return role


# ---------------------------------------------------------------------------
# OpenAI-compatible wire schema
# ---------------------------------------------------------------------------


class _WireMessage(BaseModel):
    role: str
    content: str | None = None


class _WireChoice(BaseModel):
    index: int
    message: _WireMessage
    finish_reason: str | None = None


class _WireUsage(BaseModel):
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


class _WireResponse(BaseModel):
    id: str
    model: str
    choices: list[_WireChoice]
    usage: _WireUsage = Field(default_factory=_WireUsage)


class _WireErrorDetail(BaseModel):
    message: str


class _WireErrorEnvelope(BaseModel):
    error: _WireErrorDetail


# ---------------------------------------------------------------------------
# Adapter-local settings
# ---------------------------------------------------------------------------


class VendorSettings(BaseSettings):
    """Endpoint and timeouts for one vendor, read from prefixed env vars."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    base_url: str = ""
    connect_timeout: float = 10.0  # Seconds to establish the connection
    timeout: float = 120.0  # Read/write/pool deadline


class OpenAISettings(VendorSettings):
    model_config = SettingsConfigDict(env_prefix="OPENAI_")

    base_url: str = "https://api.openai.com"


class DeepSeekSettings(VendorSettings):
    model_config = SettingsConfigDict(env_prefix="DEEPSEEK_")

    base_url: str = "https://api.deepseek.com"
    timeout: float = 180.0


class PerplexitySettings(VendorSettings):
    model_config = SettingsConfigDict(env_prefix="PERPLEXITY_")

    base_url: str = "https://api.perplexity.ai"


# ---------------------------------------------------------------------------
# OpenAI Adapter (and compatible vendors)
# ---------------------------------------------------------------------------


class OpenAIAdapter(BaseVendorAdapter):
    """OpenAI Chat Completions adapter.

    The API key comes from the KeyStore; base URL and timeouts come from
    ``OPENAI_BASE_URL`` / ``OPENAI_CONNECT_TIMEOUT`` / ``OPENAI_TIMEOUT``.
    None of this lives in the shared application Settings.
    """

    name = "openai"
    display_name = "OpenAI"
    settings_cls: type[VendorSettings] = OpenAISettings
    completions_path = "/v1/chat/completions"
    role_map: dict[Role, str] = OPENAI_ROLE_MAP
    model_ids: tuple[str, ...] = ("gpt-5.2", "gpt-5", "gpt-5-mini", "o4-mini", "o3")

    def __init__(
        self,
        key_store: KeyStore,
        base_url: str | None = None,
        http_client: httpx.AsyncClient | None = None,
        settings: VendorSettings | None = None,
    ):
        # Fails with KeyNotFoundError before any client is built
        self.api_key = key_store.get_key(self.name)

        self.settings = settings or self.settings_cls()
        self.base_url = (base_url or self.settings.base_url).rstrip("/")

        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            timeout=httpx.Timeout(self.settings.timeout, connect=self.settings.connect_timeout),
        )

    @property
    def api_url(self) -> str:
        return f"{self.base_url}{self.completions_path}"

    def models(self) -> list[ModelInfo]:
        return [ModelInfo(id=model_id, provider=self.name, owned_by=self.name) for model_id in self.model_ids]

    def encode_role(self, role: Role) -> str:
        return self.role_map[role]

    def build_payload(self, request: CompletionRequest) -> dict:
        """Translate a CompletionRequest into the vendor JSON body."""
        payload: dict = {
            "model": request.model,
            "messages": [{"role": self.encode_role(m.role), "content": m.content} for m in request.messages],
        }
        # Absent means absent: no defaults are substituted
        if request.temperature is not None:
            payload["temperature"] = request.temperature
        if request.max_tokens is not None:
            payload["max_tokens"] = request.max_tokens
        return payload

    async def complete(self, request: CompletionRequest) -> CompletionResponse:
        payload = self.build_payload(request)
        start = time.monotonic()

        try:
            resp = await self._client.post(
                self.api_url,
                json=payload,
                headers={
                    "Authorization": f"Bearer {self.api_key}",
                    "Content-Type": "application/json",
                },
            )
        except httpx.TimeoutException as e:
            logger.warning("%s request timed out after %.1fs", self.display_name, time.monotonic() - start)
            raise ProviderTimeoutError(str(e)) from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            # InvalidURL (bad base_url) is not an HTTPError subclass
            raise ProviderError(str(e) or type(e).__name__) from e

        elapsed_ms = int((time.monotonic() - start) * 1000)

        if not resp.is_success:
            message = self._error_message(resp)
            logger.warning(
                "%s returned HTTP %d in %dms: %s",
                self.display_name,
                resp.status_code,
                elapsed_ms,
                message,
            )
            raise ProviderError(
                f"{self.display_name} API error ({resp.status_code}): {message}",
                status_code=resp.status_code,
            )

        try:
            data = _WireResponse.model_validate_json(resp.content)
        except ValidationError as e:
            raise ProviderError(f"failed to parse {self.display_name} response: {e}") from e

        logger.debug("%s completion %s for %s in %dms", self.display_name, data.id, data.model, elapsed_ms)
        return self._to_domain(data)

    @staticmethod
    def _error_message(resp: httpx.Response) -> str:
        """Pull ``error.message`` out of the JSON envelope, else the raw body."""
        try:
            return _WireErrorEnvelope.model_validate_json(resp.content).error.message
        except ValidationError:
            return resp.text

    @staticmethod
    def _to_domain(data: _WireResponse) -> CompletionResponse:
        return CompletionResponse(
            id=data.id,
            model=data.model,
            choices=tuple(
                Choice(
                    index=c.index,
                    message=ChatMessage(role=role_from_vendor(c.message.role), content=c.message.content or ""),
                    finish_reason=c.finish_reason or "",
                )
                for c in data.choices
            ),
            usage=Usage(
                prompt_tokens=data.usage.prompt_tokens,
                completion_tokens=data.usage.completion_tokens,
                total_tokens=data.usage.total_tokens,
            ),
        )

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()


# ---------------------------------------------------------------------------
# DeepSeek Adapter
# ---------------------------------------------------------------------------


class DeepSeekAdapter(OpenAIAdapter):
    """DeepSeek adapter (OpenAI-compatible, extended timeout)."""

    name = "deepseek"
    display_name = "DeepSeek"
    settings_cls = DeepSeekSettings
    completions_path = "/chat/completions"
    role_map = CLASSIC_ROLE_MAP
    model_ids = ("deepseek-chat", "deepseek-reasoner")


# ---------------------------------------------------------------------------
# Perplexity Adapter
# ---------------------------------------------------------------------------


class PerplexityAdapter(OpenAIAdapter):
    """Perplexity adapter (OpenAI-compatible)."""

    name = "perplexity"
    display_name = "Perplexity"
    settings_cls = PerplexitySettings
    completions_path = "/chat/completions"
    role_map = CLASSIC_ROLE_MAP
    model_ids = ("sonar", "sonar-pro", "sonar-reasoning", "sonar-reasoning-pro")


# ---------------------------------------------------------------------------
# Adapter registry
# ---------------------------------------------------------------------------

ADAPTER_REGISTRY: dict[str, type[BaseVendorAdapter]] = {
    OpenAIAdapter.name: OpenAIAdapter,
    DeepSeekAdapter.name: DeepSeekAdapter,
    PerplexityAdapter.name: PerplexityAdapter,
}


def get_adapter(name: str, key_store: KeyStore, **kwargs) -> BaseVendorAdapter:
    """Factory: get the appropriate adapter for a vendor name."""
    cls = ADAPTER_REGISTRY.get(name)
    if cls is None:
        raise ValueError(f"No adapter registered for vendor: {name}")
    return cls(key_store, **kwargs)


def build_adapters(names: Iterable[str], key_store: KeyStore) -> list[BaseVendorAdapter]:
    """Instantiate adapters in the given order (the dispatcher's registration order).

    Every key is resolved up front, so a missing one raises KeyNotFoundError
    before any adapter opens an HTTP client.
    """
    names = list(names)
    for name in names:
        key_store.get_key(name)
    return [get_adapter(name, key_store) for name in names]
