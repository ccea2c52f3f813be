"""Classified failures raised by the OpenRouter gateway client.

Every failure surfaced to callers is an ``OpenRouterError`` subclass whose
``kind`` tells the caller what went wrong:

  network     -- transport failure reaching the provider (retried)
  http        -- non-2xx response; carries ``status`` (retried on 429/5xx)
  parse       -- malformed JSON envelope or structured-output payload
  validation  -- structured output failed schema validation
  rate_limit  -- retries exhausted on HTTP 429
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    NETWORK = "network"
    HTTP = "http"
    PARSE = "parse"
    VALIDATION = "validation"
    RATE_LIMIT = "rate_limit"


class OpenRouterError(Exception):
    """Base class for all classified gateway failures."""

    kind: ErrorKind

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause


class OpenRouterNetworkError(OpenRouterError):
    kind = ErrorKind.NETWORK


class OpenRouterHttpError(OpenRouterError):
    kind = ErrorKind.HTTP

    def __init__(
        self, status: int, message: str, cause: BaseException | None = None
    ) -> None:
        super().__init__(message, cause)
        self.status = status


class OpenRouterParseError(OpenRouterError):
    kind = ErrorKind.PARSE


class OpenRouterValidationError(OpenRouterError):
    kind = ErrorKind.VALIDATION


class OpenRouterRateLimitError(OpenRouterError):
    kind = ErrorKind.RATE_LIMIT
