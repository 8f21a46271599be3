from fastapi import Request

from llm_gateway.gateway.dispatcher import LlmGateway


def get_gateway(request: Request) -> LlmGateway:
    """Return the dispatcher assembled at startup (see main.lifespan)."""
    return request.app.state.gateway
