"""OpenRouter chat-completions client with throttling and retry logic.

Sends requests to ``https://openrouter.ai/api/v1/chat/completions`` (or
``OPENROUTER_BASE_URL``). Uses httpx for async HTTP, tenacity for
retry-on-error and pydantic for structured-output validation. Outbound
messages are validated and scrubbed of credential-looking text first.
"""

from __future__ import annotations

import json
import logging
import os
import time
from collections.abc import Awaitable, Callable, Mapping, Sequence
from typing import Any, Optional, TypeVar, Union

import httpx
from pydantic import BaseModel, ValidationError

from llm.errors import (
    OpenRouterError,
    OpenRouterHttpError,
    OpenRouterNetworkError,
    OpenRouterParseError,
)
from llm.parser import (
    json_schema_name,
    parse_llm_json,
    schema_adapter,
    validate_against_schema,
)
from llm.retry import RetryPolicy, call_with_retry
from llm.sanitize import MAX_MESSAGE_LENGTH, MessageLike, sanitize_messages
from llm.throttle import RequestThrottle
from models.chat import DefaultModelParams, GenerationOptions
from models.payload import JsonSchemaSpec, RequestPayload, ResponseFormat
from models.response import ResponseEnvelope

logger = logging.getLogger("recipe_ai")

T = TypeVar("T")
P = TypeVar("P", bound=DefaultModelParams)

API_BASE = "https://openrouter.ai/api/v1"
DEFAULT_MODEL = "tngtech/deepseek-r1t2-chimera:free"

OptionsLike = Union[GenerationOptions, Mapping[str, Any], None]
ParamsLike = Union[DefaultModelParams, Mapping[str, Any], None]


class OpenRouterClient:
    """Async client for the OpenRouter chat-completions API.

    Reads ``OPENROUTER_API_KEY`` (required) and ``OPENROUTER_BASE_URL``
    (optional) from the environment at construction. Requests from one
    instance are spaced at least ``min_request_interval`` seconds apart and
    retried on network errors and HTTP 429 / 5xx with exponential backoff.
    """

    def __init__(
        self,
        default_model: str = DEFAULT_MODEL,
        defaults: ParamsLike = None,
        *,
        timeout: float = 30.0,
        max_retries: int = 3,
        initial_retry_delay: float = 1.0,
        min_request_interval: float = 1.0,
        max_message_length: int = MAX_MESSAGE_LENGTH,
        http_client: Optional[httpx.AsyncClient] = None,
        sleep: Optional[Callable[[float], Awaitable[None]]] = None,
    ) -> None:
        api_key = os.getenv("OPENROUTER_API_KEY", "")
        if not api_key.strip():
            raise ValueError(
                "OpenRouter API key is required. "
                "Please set OPENROUTER_API_KEY environment variable."
            )
        self._api_key = api_key
        self.base_url: str = os.getenv("OPENROUTER_BASE_URL", API_BASE).rstrip("/")

        self._model = default_model
        if defaults is None:
            self._defaults = DefaultModelParams(temperature=0.7)
        else:
            self._defaults = _as_params(defaults, DefaultModelParams)

        self.max_message_length = max_message_length
        self.retry_policy = RetryPolicy(
            max_attempts=max_retries, initial_delay=initial_retry_delay
        )
        self._sleep = sleep
        self._throttle = RequestThrottle(min_request_interval, sleep=sleep)
        self._client: httpx.AsyncClient = http_client or httpx.AsyncClient(
            timeout=timeout
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def generate_chat_completion(
        self,
        messages: Sequence[MessageLike],
        options: OptionsLike = None,
    ) -> str:
        """Send ``messages`` and return the first completion's text.

        Raises:
            ValueError: Invalid message list or options (nothing is sent).
            OpenRouterError: Classified network/http/parse/rate_limit failure.
        """
        started = time.perf_counter()
        model = _requested_model(options) or self._model
        try:
            opts = _as_params(options, GenerationOptions)
            payload = self._build_payload(messages, opts)
            envelope = await self._send_with_retry(payload)
            content = _first_content(envelope)
        except Exception as exc:
            self._log_failure(model, started, exc)
            raise
        self._log_success(envelope, model, started)
        return content

    async def generate_structured(
        self,
        messages: Sequence[MessageLike],
        schema: type[T],
        options: OptionsLike = None,
    ) -> T:
        """Send ``messages`` requesting JSON output and validate it.

        ``schema`` is a pydantic model class or any type accepted by
        ``pydantic.TypeAdapter``. The provider is asked for schema-shaped
        output, but the result is always validated here.

        Raises:
            ValueError: Invalid message list or options (nothing is sent).
            OpenRouterParseError: The completion is not valid JSON.
            OpenRouterValidationError: The JSON does not match ``schema``.
            OpenRouterError: Any other classified failure.
        """
        started = time.perf_counter()
        model = _requested_model(options) or self._model
        try:
            opts = _as_params(options, GenerationOptions)
            payload = self._build_payload(messages, opts, schema)
            envelope = await self._send_with_retry(payload)
            content = _first_content(envelope)
            result = validate_against_schema(parse_llm_json(content), schema)
        except Exception as exc:
            self._log_failure(model, started, exc)
            raise
        self._log_success(envelope, model, started)
        return result

    def get_model(self) -> str:
        """Return the active default model id."""
        return self._model

    def set_model(self, model_name: str) -> None:
        """Switch the active default model (e.g. ``openai/gpt-4o``)."""
        self._model = model_name

    @property
    def defaults(self) -> DefaultModelParams:
        return self._defaults

    def update_defaults(self, params: ParamsLike = None, **overrides: Any) -> None:
        """Shallow-merge explicitly given parameters into the defaults.

        Fields not mentioned keep their current value. Passing ``None`` for
        a field clears it.
        """
        update: dict[str, Any] = {}
        if params is not None:
            update.update(_explicit_fields(_as_params(params, DefaultModelParams)))
        if overrides:
            update.update(_explicit_fields(DefaultModelParams.model_validate(overrides)))
        self._defaults = self._defaults.model_copy(update=update)

    def validate_against_schema(self, data: Any, schema: type[T]) -> T:
        """Validate ``data`` against ``schema``; see ``llm.parser``."""
        return validate_against_schema(data, schema)

    # ------------------------------------------------------------------
    # Request construction
    # ------------------------------------------------------------------

    def _build_headers(self) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self._api_key}",
            "HTTP-Referer": "https://recipe-ai.local",
            "X-Title": "Recipe AI",
        }

    def _build_payload(
        self,
        messages: Sequence[MessageLike],
        opts: GenerationOptions,
        schema: Any = None,
    ) -> RequestPayload:
        """Sanitize messages and merge defaults with per-call overrides.

        Instance defaults first, then every override that is not None.
        """
        sanitized = sanitize_messages(messages, self.max_message_length)

        params = self._defaults.model_dump(exclude_none=True)
        params.update(opts.model_dump(exclude={"model"}, exclude_none=True))

        response_format = None
        if schema is not None:
            response_format = ResponseFormat(
                json_schema=JsonSchemaSpec(
                    name=json_schema_name(schema),
                    strict=False,
                    schema=schema_adapter(schema).json_schema(),
                )
            )

        return RequestPayload(
            model=opts.model or self._model,
            messages=sanitized,
            response_format=response_format,
            **params,
        )

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    async def _send_with_retry(self, payload: RequestPayload) -> ResponseEnvelope:
        body = payload.to_body()
        return await call_with_retry(
            lambda: self._send_request(body), self.retry_policy, sleep=self._sleep
        )

    async def _send_request(self, body: dict[str, Any]) -> ResponseEnvelope:
        """One throttled POST. Classifies every failure it can see."""
        await self._throttle.wait()
        try:
            resp = await self._client.post(
                f"{self.base_url}/chat/completions",
                json=body,
                headers=self._build_headers(),
            )
        except httpx.RequestError as exc:
            raise OpenRouterNetworkError(
                "Network request to OpenRouter failed", exc
            ) from exc
        return self._handle_response(resp)

    @staticmethod
    def _handle_response(resp: httpx.Response) -> ResponseEnvelope:
        if not resp.is_success:
            raise OpenRouterHttpError(resp.status_code, _http_error_message(resp))

        try:
            data = resp.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise OpenRouterParseError(
                "Failed to parse JSON response from OpenRouter", exc
            ) from exc

        if not isinstance(data, dict):
            raise OpenRouterParseError("Unexpected response shape from OpenRouter")
        try:
            return ResponseEnvelope.model_validate(data)
        except ValidationError as exc:
            raise OpenRouterParseError(
                "Unexpected response shape from OpenRouter", exc
            ) from exc

    # ------------------------------------------------------------------
    # Logging
    # ------------------------------------------------------------------

    def _log_success(
        self, envelope: ResponseEnvelope, model: str, started: float
    ) -> None:
        usage = envelope.usage
        tokens = None
        if usage is not None:
            tokens = {
                "prompt": usage.prompt_tokens,
                "completion": usage.completion_tokens,
                "total": usage.total_tokens,
            }
        logger.info(
            "openrouter request succeeded",
            extra={
                "request_id": envelope.id,
                "model": model,
                "latency_ms": _elapsed_ms(started),
                "tokens": tokens,
            },
        )

    def _log_failure(self, model: str, started: float, exc: BaseException) -> None:
        kind = exc.kind.value if isinstance(exc, OpenRouterError) else "unknown"
        logger.warning(
            "openrouter request failed",
            extra={
                "model": model,
                "latency_ms": _elapsed_ms(started),
                "error_kind": kind,
                "error_message": str(exc),
            },
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def aclose(self) -> None:
        """Close the underlying HTTP connection pool."""
        await self._client.aclose()

    async def __aenter__(self) -> "OpenRouterClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _as_params(value: Any, model_cls: type[P]) -> P:
    """Coerce ``None``, a mapping or another params model into ``model_cls``."""
    if value is None:
        return model_cls()
    if type(value) is model_cls:
        return value
    if isinstance(value, BaseModel):
        value = _explicit_fields(value)
    return model_cls.model_validate(value)


def _requested_model(options: OptionsLike) -> Optional[str]:
    """Model named by raw per-call options, read before they are validated."""
    if isinstance(options, Mapping):
        model = options.get("model")
    else:
        model = getattr(options, "model", None)
    return model if isinstance(model, str) else None


def _explicit_fields(params: BaseModel) -> dict[str, Any]:
    """Fields the caller set, including ones explicitly set to None."""
    return params.model_dump(exclude_unset=True)


def _first_content(envelope: ResponseEnvelope) -> str:
    if not envelope.choices:
        raise OpenRouterParseError("No choices returned in response")
    content = envelope.first_content()
    if not isinstance(content, str):
        raise OpenRouterParseError("Invalid content in response")
    return content


def _http_error_message(resp: httpx.Response) -> str:
    """Prefer ``error.message`` from the body; fall back to the status line."""
    message = f"HTTP {resp.status_code}: {resp.reason_phrase}"
    try:
        body = resp.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return message
    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict) and error.get("message"):
        return str(error["message"])
    return message


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)
