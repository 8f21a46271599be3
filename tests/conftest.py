from collections.abc import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient

from llm_gateway.gateway.dispatcher import LlmGateway
from llm_gateway.gateway.errors import DomainError
from llm_gateway.gateway.types import (
    ChatMessage,
    Choice,
    CompletionRequest,
    CompletionResponse,
    ModelInfo,
    Role,
    Usage,
)
from llm_gateway.gateway.vendor_adapters import BaseVendorAdapter
from llm_gateway.main import app


class FakeAdapter(BaseVendorAdapter):
    """In-memory adapter: echoes the model back, or raises a preset error."""

    def __init__(self, name: str, model_ids: list[str], error: DomainError | None = None):
        self.name = name
        self.model_ids = list(model_ids)
        self.error = error
        self.calls: list[CompletionRequest] = []
        self.closed = False

    async def complete(self, request: CompletionRequest) -> CompletionResponse:
        self.calls.append(request)
        if self.error is not None:
            raise self.error
        return CompletionResponse(
            id=f"{self.name}-id",
            model=request.model,
            choices=(
                Choice(
                    index=0,
                    message=ChatMessage(role=Role.ASSISTANT, content=f"reply from {self.name}"),
                    finish_reason="stop",
                ),
            ),
            usage=Usage(prompt_tokens=10, completion_tokens=5, total_tokens=15),
        )

    def models(self) -> list[ModelInfo]:
        return [ModelInfo(id=m, provider=self.name, owned_by=self.name) for m in self.model_ids]

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def make_adapter():
    """Factory fixture: make_adapter("openai", ["gpt-x"], error=None)."""
    return FakeAdapter


@pytest.fixture
def openai_fake() -> FakeAdapter:
    return FakeAdapter("openai", ["gpt-x"])


@pytest.fixture
def anthropic_fake() -> FakeAdapter:
    return FakeAdapter("anthropic", ["claude-y"])


@pytest.fixture
def gateway(openai_fake: FakeAdapter, anthropic_fake: FakeAdapter) -> LlmGateway:
    return LlmGateway([openai_fake, anthropic_fake])


@pytest.fixture
async def client(gateway: LlmGateway) -> AsyncGenerator[AsyncClient, None]:
    # ASGITransport does not run the lifespan, so wire the dispatcher directly
    app.state.gateway = gateway
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
