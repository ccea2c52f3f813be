"""OpenRouter gateway client, its error taxonomy and output parsing."""

from llm.client import OpenRouterClient
from llm.errors import (
    ErrorKind,
    OpenRouterError,
    OpenRouterHttpError,
    OpenRouterNetworkError,
    OpenRouterParseError,
    OpenRouterRateLimitError,
    OpenRouterValidationError,
)
from llm.parser import parse_llm_json, validate_against_schema
from llm.sanitize import redact_sensitive_data, sanitize_messages

__all__ = [
    "OpenRouterClient",
    "ErrorKind",
    "OpenRouterError",
    "OpenRouterHttpError",
    "OpenRouterNetworkError",
    "OpenRouterParseError",
    "OpenRouterRateLimitError",
    "OpenRouterValidationError",
    "parse_llm_json",
    "validate_against_schema",
    "redact_sensitive_data",
    "sanitize_messages",
]
