"""Completion endpoints.

Provides:
  - POST /completions: run one chat completion through the gateway
  - GET /models: list every model the registered providers declare
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from llm_gateway.core.dependencies import get_gateway
from llm_gateway.gateway.dispatcher import LlmGateway
from llm_gateway.schemas.completion import (
    CompletionRequestIn,
    CompletionResponseOut,
    ModelInfoOut,
    ModelsResponseOut,
)

router = APIRouter(tags=["completions"])


@router.post("/completions", response_model=CompletionResponseOut)
async def create_completion(
    body: CompletionRequestIn,
    gateway: LlmGateway = Depends(get_gateway),
):
    # DomainErrors raised here are rendered by core.exceptions.domain_error_handler
    response = await gateway.complete(body.to_domain())
    return CompletionResponseOut.from_domain(response)


@router.get("/models", response_model=ModelsResponseOut)
async def list_models(gateway: LlmGateway = Depends(get_gateway)):
    return ModelsResponseOut(models=[ModelInfoOut.from_domain(m) for m in gateway.list_models()])
