from __future__ import annotations

from typing import Any, Dict, List, Optional, Union

import httpx
import pytest


class StubAsyncClient:
    """Replays queued responses (or raises queued exceptions) and records calls."""

    def __init__(self, outcomes: List[Union[httpx.Response, Exception]]):
        self._outcomes = outcomes
        self.calls: List[Dict[str, Any]] = []

    async def __aenter__(self) -> "StubAsyncClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        return None

    def _next(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        self.calls.append({"method": method, "url": url, **kwargs})
        outcome = self._outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    async def get(self, url: str, headers: Optional[Dict[str, str]] = None):
        return self._next("GET", url, headers=headers)

    async def post(self, url: str, headers=None, json=None):
        return self._next("POST", url, headers=headers, json=json)

    async def request(self, method: str, url: str, headers=None, content=None):
        return self._next(method, url, headers=headers, content=content)


@pytest.fixture()
def stub_http(monkeypatch):
    """Install a StubAsyncClient for ``httpx.AsyncClient`` and return it."""

    def _install(*outcomes: Union[httpx.Response, Exception]) -> StubAsyncClient:
        client = StubAsyncClient(list(outcomes))
        monkeypatch.setattr("httpx.AsyncClient", lambda timeout: client)
        return client

    return _install
