"""Chat-completions response envelope.

Parsing is lenient: unknown keys are ignored and message content is kept
as-is so the client can report a non-string content as a parse failure.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict


class CompletionMessage(BaseModel):
    model_config = ConfigDict(extra="ignore")

    role: Optional[str] = None
    content: Any = None


class Choice(BaseModel):
    model_config = ConfigDict(extra="ignore")

    message: Optional[CompletionMessage] = None
    finish_reason: Optional[str] = None


class Usage(BaseModel):
    """Token counters reported by the provider."""

    model_config = ConfigDict(extra="ignore")

    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


class ResponseEnvelope(BaseModel):
    """Parsed successful response from the provider."""

    model_config = ConfigDict(extra="ignore")

    id: Optional[str] = None
    choices: list[Choice] = []
    usage: Optional[Usage] = None

    def first_content(self) -> Any:
        """Return the first choice's message content, or None."""
        if not self.choices or self.choices[0].message is None:
            return None
        return self.choices[0].message.content
