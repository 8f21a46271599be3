"""Tests for the REST transport: routes, wire DTOs, error mapping."""

import pytest
from prometheus_client import REGISTRY

from llm_gateway.core.exceptions import error_status
from llm_gateway.core.metrics import REQUEST_COUNT, UNMATCHED_PATH
from llm_gateway.gateway.dispatcher import LlmGateway
from llm_gateway.gateway.errors import (
    InvalidRequestError,
    KeyNotFoundError,
    ModelNotFoundError,
    ProviderError,
    ProviderTimeoutError,
)
from llm_gateway.gateway.types import Role
from llm_gateway.main import app
from llm_gateway.schemas.completion import CompletionRequestIn, parse_role


def _body(model="gpt-x", role="user", **extra) -> dict:
    return {"model": model, "messages": [{"role": role, "content": "hi"}], **extra}


class TestSchemas:
    def test_parse_role(self):
        assert parse_role("system") == Role.SYSTEM
        assert parse_role("tool") == Role.TOOL

    def test_parse_role_rejects_vendor_aliases(self):
        # "developer" is an outbound vendor string, not an API role
        with pytest.raises(InvalidRequestError, match="unknown role: developer"):
            parse_role("developer")

    def test_to_domain(self):
        req = CompletionRequestIn(**_body(temperature=0.2, max_tokens=50)).to_domain()
        assert req.model == "gpt-x"
        assert req.messages[0].role == Role.USER
        assert req.temperature == 0.2
        assert req.max_tokens == 50


class TestErrorMapping:
    @pytest.mark.parametrize(
        "error, status",
        [
            (InvalidRequestError("bad"), 400),
            (ModelNotFoundError("m"), 404),
            (KeyNotFoundError("openai"), 500),
            (ProviderTimeoutError(), 504),
            (ProviderError("boom"), 502),
        ],
    )
    def test_status_per_kind(self, error, status):
        assert error_status(error)[0] == status

    def test_messages(self):
        assert error_status(KeyNotFoundError("openai"))[1] == "API key not configured for openai"
        assert error_status(ProviderTimeoutError("read"))[1] == "request timed out"
        assert error_status(ProviderError("OpenAI API error (500): overloaded"))[1] == (
            "OpenAI API error (500): overloaded"
        )


class TestCompletionsEndpoint:
    @pytest.mark.asyncio
    async def test_success(self, client, anthropic_fake):
        resp = await client.post("/api/v1/completions", json=_body("claude-y"))

        assert resp.status_code == 200
        data = resp.json()
        assert data["id"] == "anthropic-id"
        assert data["model"] == "claude-y"
        assert data["choices"] == [
            {
                "index": 0,
                "message": {"role": "assistant", "content": "reply from anthropic"},
                "finish_reason": "stop",
            }
        ]
        assert data["usage"] == {"prompt_tokens": 10, "completion_tokens": 5, "total_tokens": 15}
        assert len(anthropic_fake.calls) == 1

    @pytest.mark.asyncio
    async def test_optional_fields_forwarded(self, client, openai_fake):
        await client.post("/api/v1/completions", json=_body(temperature=0.3, max_tokens=12))
        assert openai_fake.calls[0].temperature == 0.3
        assert openai_fake.calls[0].max_tokens == 12

    @pytest.mark.asyncio
    async def test_empty_messages_400(self, client):
        resp = await client.post("/api/v1/completions", json={"model": "gpt-x", "messages": []})
        assert resp.status_code == 400
        assert resp.json() == {"error": "messages must not be empty"}

    @pytest.mark.asyncio
    async def test_unknown_role_400(self, client, openai_fake):
        resp = await client.post("/api/v1/completions", json=_body(role="narrator"))
        assert resp.status_code == 400
        assert resp.json() == {"error": "unknown role: narrator"}
        assert openai_fake.calls == []

    @pytest.mark.asyncio
    async def test_model_not_found_404(self, client):
        resp = await client.post("/api/v1/completions", json=_body("nope"))
        assert resp.status_code == 404
        assert resp.json() == {"error": "model not found: nope"}

    @pytest.mark.asyncio
    async def test_malformed_body_422(self, client):
        resp = await client.post("/api/v1/completions", json={"messages": []})
        assert resp.status_code == 422
        assert set(resp.json()) == {"error"}
        assert "body.model" in resp.json()["error"]

    @pytest.mark.asyncio
    async def test_negative_max_tokens_422(self, client, openai_fake):
        resp = await client.post("/api/v1/completions", json=_body(max_tokens=-1))
        assert resp.status_code == 422
        assert "max_tokens" in resp.json()["error"]
        assert openai_fake.calls == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error, status, message",
        [
            (ProviderError("OpenAI API error (500): overloaded", status_code=500), 502, "overloaded"),
            (ProviderTimeoutError(), 504, "request timed out"),
            (KeyNotFoundError("openai"), 500, "API key not configured for openai"),
        ],
    )
    async def test_adapter_errors_mapped(self, client, make_adapter, error, status, message):
        app.state.gateway = LlmGateway([make_adapter("openai", ["gpt-x"], error=error)])

        resp = await client.post("/api/v1/completions", json=_body())

        assert resp.status_code == status
        assert message in resp.json()["error"]


class TestModelsEndpoint:
    @pytest.mark.asyncio
    async def test_list_models(self, client):
        resp = await client.get("/api/v1/models")
        assert resp.status_code == 200
        assert resp.json() == {
            "models": [
                {"id": "gpt-x", "provider": "openai", "owned_by": "openai"},
                {"id": "claude-y", "provider": "anthropic", "owned_by": "anthropic"},
            ]
        }

    @pytest.mark.asyncio
    async def test_list_models_empty(self, client):
        app.state.gateway = LlmGateway([])
        resp = await client.get("/api/v1/models")
        assert resp.json() == {"models": []}


class TestHealthAndMetrics:
    @pytest.mark.asyncio
    async def test_health(self, client):
        resp = await client.get("/api/v1/health")
        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "ok"
        assert data["providers"] == ["openai", "anthropic"]

    @pytest.mark.asyncio
    async def test_metrics_exposes_completion_counter(self, client):
        await client.post("/api/v1/completions", json=_body())
        resp = await client.get("/metrics")
        assert resp.status_code == 200
        assert "llm_gateway_completions_total" in resp.text
        assert "http_requests_total" in resp.text

    @pytest.mark.asyncio
    async def test_unmatched_paths_share_one_series(self, client):
        for i in range(5):
            resp = await client.get(f"/scan/{i}")
            assert resp.status_code == 404

        paths = {
            sample.labels["path"]
            for metric in REQUEST_COUNT.collect()
            for sample in metric.samples
            if sample.name == "http_requests_total"
        }
        assert UNMATCHED_PATH in paths
        assert not any(p.startswith("/scan/") for p in paths)

    @pytest.mark.asyncio
    async def test_matched_requests_labelled_by_route(self, client):
        await client.get("/api/v1/models")

        value = REGISTRY.get_sample_value(
            "http_requests_total", {"method": "GET", "path": "/api/v1/models", "status": "200"}
        )
        assert value is not None and value >= 1
