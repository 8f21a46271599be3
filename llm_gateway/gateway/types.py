"""Core types and DTOs for the completion gateway.

Everything here is vendor-neutral: adapters translate to and from these
types, the dispatcher routes them, and the REST layer serializes them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class Role(str, Enum):
    """Conversational role of a chat message.

    Vendor-specific role strings (OpenAI's "developer", legacy "function")
    are mapped in the adapter layer, never here.
    """

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"
    TOOL = "tool"


# ---------------------------------------------------------------------------
# Request side
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ChatMessage:
    """A single message: one role, one piece of text."""

    role: Role
    content: str


@dataclass(frozen=True)
class CompletionRequest:
    """Normalized completion request, built once at the transport boundary.

    ``temperature`` and ``max_tokens`` are optional and passed through as-is;
    ``None`` means "let the vendor decide".
    """

    model: str
    messages: tuple[ChatMessage, ...] = ()
    temperature: float | None = None
    max_tokens: int | None = None

    def __post_init__(self) -> None:
        # Accept any sequence from callers but store an immutable tuple
        if not isinstance(self.messages, tuple):
            object.__setattr__(self, "messages", tuple(self.messages))


# ---------------------------------------------------------------------------
# Response side
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Usage:
    """Token accounting as reported by the vendor.

    Values are never recomputed: ``total_tokens`` is usually
    ``prompt_tokens + completion_tokens`` but that is the vendor's call.
    """

    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


@dataclass(frozen=True)
class Choice:
    """One candidate reply. ``index`` is kept exactly as the vendor sent it."""

    index: int
    message: ChatMessage
    finish_reason: str = ""


@dataclass(frozen=True)
class CompletionResponse:
    """Unified completion response, same shape for every vendor."""

    id: str
    model: str
    choices: tuple[Choice, ...] = ()
    usage: Usage = field(default_factory=Usage)

    def __post_init__(self) -> None:
        if not isinstance(self.choices, tuple):
            object.__setattr__(self, "choices", tuple(self.choices))


# ---------------------------------------------------------------------------
# Model catalog
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ModelInfo:
    """A model id declared by an adapter, plus who serves it."""

    id: str
    provider: str
    owned_by: str
