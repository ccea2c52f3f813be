"""Chat message and sampling-parameter models shared by the LLM gateway."""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict

Role = Literal["system", "user", "assistant"]

VALID_ROLES: tuple[str, ...] = ("system", "user", "assistant")


class ChatMessage(BaseModel):
    """Single chat turn sent to the model."""

    model_config = ConfigDict(frozen=True)

    role: Role
    content: str


class DefaultModelParams(BaseModel):
    """Baseline sampling parameters applied when a call omits them.

    Every field is optional; only fields that are explicitly set end up
    in the outbound payload.
    """

    model_config = ConfigDict(extra="forbid")

    temperature: Optional[float] = None
    top_p: Optional[float] = None
    max_tokens: Optional[int] = None
    frequency_penalty: Optional[float] = None
    presence_penalty: Optional[float] = None


class GenerationOptions(DefaultModelParams):
    """Per-call overrides: sampling parameters plus an optional model id."""

    model: Optional[str] = None
