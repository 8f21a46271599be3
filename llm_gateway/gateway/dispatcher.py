"""LLM Gateway: dispatches completion requests to vendor adapters.

Main entry point for any transport:
  1. Rejects requests without messages
  2. Finds the first registered adapter that declares the requested model
  3. Delegates the call and hands back whatever the adapter produced

Usage:
    gateway = LlmGateway([OpenAIAdapter(EnvKeyStore())])

    response = await gateway.complete(request)
    catalog = gateway.list_models()
"""

from __future__ import annotations

import logging
import time
from collections.abc import Sequence

from llm_gateway.core.metrics import COMPLETION_DURATION, COMPLETIONS
from llm_gateway.gateway.errors import DomainError, InvalidRequestError, ModelNotFoundError
from llm_gateway.gateway.types import CompletionRequest, CompletionResponse, ModelInfo
from llm_gateway.gateway.vendor_adapters import BaseVendorAdapter

logger = logging.getLogger(__name__)


class LlmGateway:
    """Routes completions by model id over an ordered list of adapters.

    Routing is a linear scan of each adapter's declared ``models()`` in
    registration order; the first match wins. The adapter list is fixed at
    construction, so concurrent requests share it without locking.
    """

    def __init__(self, adapters: Sequence[BaseVendorAdapter]):
        self._adapters: tuple[BaseVendorAdapter, ...] = tuple(adapters)
        self._warn_on_shadowed_models()

    @property
    def providers(self) -> list[str]:
        return [adapter.name for adapter in self._adapters]

    def _warn_on_shadowed_models(self) -> None:
        owner: dict[str, str] = {}
        for adapter in self._adapters:
            for model in adapter.models():
                if model.id in owner:
                    logger.warning(
                        "Model %s declared by both %s and %s; %s wins",
                        model.id,
                        owner[model.id],
                        adapter.name,
                        owner[model.id],
                    )
                else:
                    owner[model.id] = adapter.name

    def find_adapter(self, model: str) -> BaseVendorAdapter | None:
        """Return the first adapter that declares ``model``, if any."""
        for adapter in self._adapters:
            if any(m.id == model for m in adapter.models()):
                return adapter
        return None

    async def complete(self, request: CompletionRequest) -> CompletionResponse:
        """Dispatch a single completion request.

        Raises InvalidRequestError for an empty message list and
        ModelNotFoundError when no adapter declares the model. Adapter
        errors propagate unchanged.
        """
        if not request.messages:
            raise InvalidRequestError("messages must not be empty")

        adapter = self.find_adapter(request.model)
        if adapter is None:
            raise ModelNotFoundError(request.model)

        logger.info(
            "dispatching completion request",
            extra={
                "model": request.model,
                "provider": adapter.name,
                "message_count": len(request.messages),
            },
        )

        start = time.perf_counter()
        try:
            response = await adapter.complete(request)
        except DomainError as e:
            COMPLETIONS.labels(provider=adapter.name, outcome=e.code).inc()
            raise
        finally:
            COMPLETION_DURATION.labels(provider=adapter.name).observe(time.perf_counter() - start)

        COMPLETIONS.labels(provider=adapter.name, outcome="ok").inc()
        return response

    def list_models(self) -> list[ModelInfo]:
        """All declared models, concatenated in registration order (no dedup)."""
        return [model for adapter in self._adapters for model in adapter.models()]

    async def aclose(self) -> None:
        """Close every adapter's HTTP resources."""
        for adapter in self._adapters:
            await adapter.aclose()

    def get_status(self) -> dict:
        """Get gateway status for health reporting."""
        return {
            "providers": self.providers,
            "models": len(self.list_models()),
        }
