"""
Pytest configuration and fixtures for devcenter-deploy tests.
"""

import io
import json
import os
from typing import List

import httpx
import pytest

from devcenter_deploy.core.config import Settings


@pytest.fixture(autouse=True)
def clean_devcenter_env(monkeypatch):
    """Keep DEVCENTER_* variables from the host out of Settings()."""
    for key in list(os.environ):
        if key.startswith("DEVCENTER_"):
            monkeypatch.delenv(key, raising=False)


class FakeStore:
    """Records every request and answers from a queue of canned responses.

    Queue items are dicts (200 JSON body) or ``(status, body)`` tuples.
    """

    def __init__(self):
        self.responses: List = []
        self.requests: List[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self.responses:
            raise AssertionError(f"No mocked response for: {request.method} {request.url}")
        item = self.responses.pop(0)
        if isinstance(item, tuple):
            status, body = item
        else:
            status, body = 200, item
        return httpx.Response(status, json=body)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))

    def paths(self) -> List[str]:
        return [r.url.path for r in self.requests]

    def body(self, index: int) -> dict:
        return json.loads(self.requests[index].content)


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None, poll_interval_seconds=30)


@pytest.fixture
def sleeps():
    """Injected sleep that records delays instead of waiting."""
    calls: List[float] = []

    async def fake_sleep(delay: float) -> None:
        calls.append(delay)

    fake_sleep.calls = calls
    return fake_sleep


@pytest.fixture
def options():
    return {
        "tenantId": "myTenantId",
        "clientId": "myClientId",
        "clientSecret": "myClientSecret",
        "appId": "myAppId",
        "appx": io.BytesIO(b""),
    }
