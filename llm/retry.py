"""Retry-with-backoff policy for gateway requests.

Built on tenacity's ``AsyncRetrying`` so backoff sleeps are cooperative.
Only network failures and HTTP 429 / 5xx responses are retried; everything
else propagates on the first failure.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Optional, TypeVar

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from llm.errors import (
    OpenRouterHttpError,
    OpenRouterNetworkError,
    OpenRouterRateLimitError,
)

logger = logging.getLogger("recipe_ai")

T = TypeVar("T")


def is_retryable(exc: BaseException) -> bool:
    """Return True for transient gateway errors that should be retried."""
    if isinstance(exc, OpenRouterHttpError):
        return exc.status == 429 or exc.status >= 500
    return isinstance(exc, OpenRouterNetworkError)


@dataclass(frozen=True)
class RetryPolicy:
    """Attempt budget and backoff for one logical request.

    The delay before attempt ``k + 1`` is ``initial_delay * 2 ** (k - 1)``.
    """

    max_attempts: int = 3
    initial_delay: float = 1.0


def _log_retry(retry_state: RetryCallState) -> None:
    exc = retry_state.outcome.exception() if retry_state.outcome else None
    logger.warning(
        "retrying openrouter request",
        extra={
            "attempt": retry_state.attempt_number,
            "status": getattr(exc, "status", None),
            "error_kind": getattr(getattr(exc, "kind", None), "value", None),
            "error_message": str(exc) if exc else None,
        },
    )


async def call_with_retry(
    func: Callable[[], Awaitable[T]],
    policy: RetryPolicy,
    *,
    sleep: Optional[Callable[[float], Awaitable[None]]] = None,
) -> T:
    """Await ``func`` under ``policy``.

    Raises:
        OpenRouterRateLimitError: Attempts exhausted and the last failure
            was HTTP 429. The 429 error is attached as cause.
        OpenRouterError: Any other failure, unchanged.
    """
    retrying = AsyncRetrying(
        stop=stop_after_attempt(policy.max_attempts),
        wait=wait_exponential(multiplier=policy.initial_delay, min=0),
        retry=retry_if_exception(is_retryable),
        before_sleep=_log_retry,
        sleep=sleep or asyncio.sleep,
        reraise=True,
    )
    try:
        return await retrying(func)
    except OpenRouterHttpError as exc:
        if exc.status == 429:
            raise OpenRouterRateLimitError(
                f"Rate limit exceeded after {policy.max_attempts} attempts", exc
            ) from exc
        raise
