"""
Pytest configuration and shared fixtures for the recipe AI gateway tests
"""
import json

import httpx
import pytest

from llm.client import OpenRouterClient


# ============================================================
# Environment
# ============================================================

@pytest.fixture(autouse=True)
def openrouter_env(monkeypatch):
    """Every test starts with a known API key and no overrides"""
    monkeypatch.setenv("OPENROUTER_API_KEY", "test_key")
    monkeypatch.delenv("OPENROUTER_BASE_URL", raising=False)
    monkeypatch.delenv("OPENROUTER_MODEL", raising=False)


# ============================================================
# Provider stubs
# ============================================================

@pytest.fixture
def completion_body():
    """
    Factory for a successful chat-completions response body

    Usage:
        body = completion_body("hello", usage={"prompt_tokens": 3, ...})
    """
    def _body(content="hello", request_id="r1", usage=None, finish_reason="stop"):
        body = {
            "id": request_id,
            "choices": [
                {
                    "message": {"role": "assistant", "content": content},
                    "finish_reason": finish_reason,
                }
            ],
        }
        if usage is not None:
            body["usage"] = usage
        return body

    return _body


class StubProvider:
    """
    MockTransport handler replaying queued responses

    Each queued item is an ``httpx.Response`` or an exception to raise.
    The last item is repeated once the queue runs dry. Every request is
    recorded with its decoded JSON body.
    """

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests = []

    @property
    def bodies(self):
        return [json.loads(r.content) for r in self.requests]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        item = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(item, Exception):
            raise item
        # Fresh copy so a repeated item is never read twice
        return httpx.Response(item.status_code, headers=item.headers, content=item.content)


@pytest.fixture
def stub_provider():
    return StubProvider


class SleepRecorder:
    """Async sleep replacement that records delays instead of waiting"""

    def __init__(self):
        self.delays = []

    async def __call__(self, delay):
        self.delays.append(delay)


@pytest.fixture
def sleep_recorder():
    return SleepRecorder()


@pytest.fixture
def make_client(sleep_recorder):
    """
    Build an OpenRouterClient whose HTTP traffic goes to ``handler``

    Throttling is disabled and backoff sleeps are recorded unless the
    test overrides ``min_request_interval`` / ``sleep``.
    """
    def _make(handler, *args, **kwargs):
        kwargs.setdefault("sleep", sleep_recorder)
        kwargs.setdefault("min_request_interval", 0.0)
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        return OpenRouterClient(*args, http_client=http_client, **kwargs)

    return _make
