from __future__ import annotations

import asyncio
from typing import Any, Callable, Iterable, List

import httpx
import pytest

from igplanner_jobs.client import JobClient

BASE_URL = "https://backend.test"
TRANSPORT_ERROR = object()


class FakeClock:
    """Monotonic clock that only moves when the poller sleeps."""

    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: List[float] = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


class ScriptedBackend:
    """MockTransport handler replaying canned responses in order."""

    def __init__(self, script: Iterable[Any]) -> None:
        self.script = list(script)
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if len(self.requests) > len(self.script):
            raise AssertionError(f"unexpected request #{len(self.requests)}: {request.url}")
        item = self.script[len(self.requests) - 1]
        if item is TRANSPORT_ERROR:
            raise httpx.ConnectError("connection reset", request=request)
        if callable(item):
            return item(request)
        return item


def corrupt_gzip_response() -> httpx.Response:
    """A 200 whose body claims gzip encoding but is not gzip."""

    return httpx.Response(200, headers={"Content-Encoding": "gzip"}, stream=httpx.ByteStream(b"not gzip"))


def status_response(state: str, **fields: Any) -> httpx.Response:
    return httpx.Response(200, json={"ok": True, "job_id": "job-1", "status": state, **fields})


def run(coro):  # noqa: ANN001
    return asyncio.run(coro)


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def make_client(fake_clock: FakeClock) -> Callable[[ScriptedBackend], JobClient]:
    def _make(backend: ScriptedBackend) -> JobClient:
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(backend), base_url=BASE_URL)
        return JobClient(http_client=http_client, clock=fake_clock, sleep=fake_clock.sleep)

    return _make
