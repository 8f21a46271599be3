"""Wire DTOs for the completion REST API."""

from pydantic import BaseModel, Field

from llm_gateway.gateway.errors import InvalidRequestError
from llm_gateway.gateway.types import (
    ChatMessage,
    CompletionRequest,
    CompletionResponse,
    ModelInfo,
    Role,
)

# Roles accepted from clients. Unlike vendor replies, unknown roles are rejected.
_API_ROLES: dict[str, Role] = {role.value: role for role in Role}


def parse_role(value: str) -> Role:
    role = _API_ROLES.get(value)
    if role is None:
        raise InvalidRequestError(f"unknown role: {value}")
    return role


class MessageIn(BaseModel):
    role: str
    content: str


class CompletionRequestIn(BaseModel):
    model: str
    messages: list[MessageIn]
    temperature: float | None = None
    max_tokens: int | None = Field(None, ge=0)

    def to_domain(self) -> CompletionRequest:
        """Convert to the domain request; unknown roles raise InvalidRequestError."""
        return CompletionRequest(
            model=self.model,
            messages=tuple(ChatMessage(role=parse_role(m.role), content=m.content) for m in self.messages),
            temperature=self.temperature,
            max_tokens=self.max_tokens,
        )


class MessageOut(BaseModel):
    role: str
    content: str


class ChoiceOut(BaseModel):
    index: int
    message: MessageOut
    finish_reason: str


class UsageOut(BaseModel):
    prompt_tokens: int
    completion_tokens: int
    total_tokens: int


class CompletionResponseOut(BaseModel):
    id: str
    model: str
    choices: list[ChoiceOut]
    usage: UsageOut

    @classmethod
    def from_domain(cls, resp: CompletionResponse) -> "CompletionResponseOut":
        return cls(
            id=resp.id,
            model=resp.model,
            choices=[
                ChoiceOut(
                    index=c.index,
                    message=MessageOut(role=c.message.role.value, content=c.message.content),
                    finish_reason=c.finish_reason,
                )
                for c in resp.choices
            ],
            usage=UsageOut(
                prompt_tokens=resp.usage.prompt_tokens,
                completion_tokens=resp.usage.completion_tokens,
                total_tokens=resp.usage.total_tokens,
            ),
        )


class ModelInfoOut(BaseModel):
    id: str
    provider: str
    owned_by: str

    @classmethod
    def from_domain(cls, model: ModelInfo) -> "ModelInfoOut":
        return cls(id=model.id, provider=model.provider, owned_by=model.owned_by)


class ModelsResponseOut(BaseModel):
    models: list[ModelInfoOut]
