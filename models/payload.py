"""Outbound chat-completions request body."""

from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from models.chat import ChatMessage


class JsonSchemaSpec(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str
    strict: bool = False
    # ``schema`` shadows a BaseModel attribute, hence the alias.
    schema_: dict[str, Any] = Field(alias="schema")


class ResponseFormat(BaseModel):
    """``response_format`` directive requesting JSON-schema output."""

    type: Literal["json_schema"] = "json_schema"
    json_schema: JsonSchemaSpec


class RequestPayload(BaseModel):
    """Fully assembled request body. Built fresh for every call."""

    model: str
    messages: list[ChatMessage]
    temperature: Optional[float] = None
    top_p: Optional[float] = None
    max_tokens: Optional[int] = None
    frequency_penalty: Optional[float] = None
    presence_penalty: Optional[float] = None
    response_format: Optional[ResponseFormat] = None

    def to_body(self) -> dict[str, Any]:
        """Return the JSON body with unset parameters omitted."""
        return self.model_dump(by_alias=True, exclude_none=True)
