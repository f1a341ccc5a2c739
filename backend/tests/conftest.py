"""
pytest configuration: ensure backend package is importable
regardless of the directory pytest is invoked from, and provide
a fake clock and a stub completion collaborator.
"""
import sys
import os

import pytest

# Insert the backend root so that `import rate_limit`, `import services.prompt`, etc. work
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from rate_limit import SlidingWindowRateLimiter
from services.completion import CompletionResult, CompletionUsage


class FakeClock:
    """Millisecond clock that only moves when a test says so."""

    def __init__(self, start_ms: int = 1_700_000_000_000):
        self.now = start_ms

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


class StubCompletionClient:
    """Records every call; returns `result` or raises `error`."""

    def __init__(self, result=None, error=None):
        self.result = result or CompletionResult(
            content="  A short explanation.  ",
            usage=CompletionUsage(prompt_tokens=10, completion_tokens=20, total_tokens=30),
        )
        self.error = error
        self.calls = []

    async def complete(self, model, messages, max_tokens, temperature):
        self.calls.append({
            "model": model,
            "messages": messages,
            "max_tokens": max_tokens,
            "temperature": temperature,
        })
        if self.error is not None:
            raise self.error
        return self.result


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def completion_stub():
    return StubCompletionClient()


@pytest.fixture
def client(clock, completion_stub):
    """TestClient on the real app with a fresh limiter and the stub collaborator."""
    from fastapi.testclient import TestClient
    from main import app

    saved = (app.state.rate_limiter, app.state.completion_client)
    app.state.rate_limiter = SlidingWindowRateLimiter(clock=clock)
    app.state.completion_client = completion_stub
    yield TestClient(app)
    app.state.rate_limiter, app.state.completion_client = saved
