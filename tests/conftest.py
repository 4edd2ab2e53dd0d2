from __future__ import annotations

from typing import Any

import pytest
import requests

from global_monitor.feeds import Feed
from global_monitor.models import FeedKind


class FakeClock:
    def __init__(self, start: float = 0.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now


class FakeResponse:
    def __init__(
        self,
        payload: Any = None,
        status_code: int = 200,
        headers: dict[str, str] | None = None,
        text: str | None = None,
    ) -> None:
        self._payload = payload
        self.status_code = status_code
        self.headers = headers if headers is not None else {"content-type": "application/json"}
        self.text = text if text is not None else ""
        self.content = b"" if payload is None and not text else b"x"

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"HTTP {self.status_code}")

    def json(self) -> Any:
        if self._payload is None:
            raise ValueError("no JSON body")
        return self._payload


class FakeHttp:
    """Routes ``requests.get`` calls by URL substring to canned responses."""

    def __init__(self) -> None:
        self.routes: list[tuple[str, Any]] = []
        self.calls: list[tuple[str, dict[str, Any] | None]] = []

    def add(self, fragment: str, response: Any) -> None:
        self.routes.append((fragment, response))

    def get(self, url: str, params: dict[str, Any] | None = None, headers: Any = None, timeout: Any = None) -> FakeResponse:
        self.calls.append((url, params))
        for fragment, response in self.routes:
            if fragment in url:
                if isinstance(response, Exception):
                    raise response
                if callable(response):
                    return response(url, params)
                return response
        raise requests.ConnectionError(f"no route for {url}")


@pytest.fixture
def fake_http(monkeypatch: pytest.MonkeyPatch) -> FakeHttp:
    http = FakeHttp()
    monkeypatch.setattr(requests, "get", http.get)
    return http


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


class CountingFetcher:
    """Adapter stub returning queued results in order, repeating the last one."""

    def __init__(self, *results: Any) -> None:
        self.results = list(results)
        self.calls = 0

    def __call__(self) -> Any:
        self.calls += 1
        index = min(self.calls, len(self.results)) - 1
        result = self.results[index]
        if isinstance(result, Exception):
            raise result
        return result


def make_feed(kind: FeedKind, interval: float, *fetchers: Any) -> Feed:
    return Feed(kind=kind, interval=interval, fetchers=tuple(fetchers))
