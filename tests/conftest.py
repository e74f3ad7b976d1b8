"""
Pytest configuration and fixtures.

HTTP is simulated with httpx.MockTransport; nothing here touches the network.

Usage:
    pytest tests/ -v
"""

import base64
from typing import Any, Callable, Union

import httpx
import pytest

from git_auditor.core.clients.cache import ResponseCache
from git_auditor.core.clients.credentials import CredentialRotator
from git_auditor.core.clients.github import GitHubClient

API = "https://api.github.com"

Route = Union[httpx.Response, Callable[[httpx.Request], Any]]


class FakeGitHub:
    """Routes absolute URLs to canned responses and records every request."""

    def __init__(self):
        self.routes: dict[str, Route] = {}
        self.requests: list[httpx.Request] = []

    def add(self, url: str, json: Any = None, status: int = 200, headers=None) -> None:
        self.routes[url] = httpx.Response(status, json=json, headers=headers)

    def add_handler(self, url: str, handler: Callable[[httpx.Request], Any]) -> None:
        self.routes[url] = handler

    def calls(self, url: str) -> int:
        return sum(1 for r in self.requests if str(r.url) == url)

    def _handle(self, request: httpx.Request):
        self.requests.append(request)
        route = self.routes.get(str(request.url))
        if route is None:
            return httpx.Response(404, json={"message": "Not Found"})
        if isinstance(route, httpx.Response):
            return httpx.Response(route.status_code, content=route.content, headers=route.headers)
        return route(request)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self._handle)


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def fake_github():
    return FakeGitHub()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def make_client(fake_github):
    """Build a GitHubClient wired to the fake transport."""

    def _make(tokens=(), timeout_seconds=5.0, cache=None):
        http = httpx.AsyncClient(transport=fake_github.transport())
        return GitHubClient(
            http,
            cache or ResponseCache(max_entries=100, ttl_seconds=60),
            CredentialRotator(tokens),
            timeout_seconds=timeout_seconds,
        )

    return _make


def b64(text: str) -> str:
    return base64.b64encode(text.encode()).decode()


@pytest.fixture
def encode_readme():
    return b64
