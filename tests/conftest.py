from __future__ import annotations

import json
from typing import Callable, Dict, List, Optional

import pytest
import requests

from fetchwise.infrastructure.cancellation import CancellationToken

REASONS = {200: "OK", 404: "Not Found", 429: "Too Many Requests", 500: "Internal Server Error", 503: "Service Unavailable"}


def _make_response(
    status_code: int,
    headers: Optional[Dict[str, str]] = None,
    url: str = "http://example.test",
    payload: Optional[dict] = None,
) -> requests.Response:
    r = requests.Response()
    r.status_code = status_code
    r.reason = REASONS.get(status_code, "")
    r.url = url
    r._content = json.dumps(payload or {}).encode("utf-8")  # type: ignore[attr-defined]
    r.headers["Content-Type"] = "application/json"
    for name, value in (headers or {}).items():
        r.headers[name] = value
    return r


class StubTransport:
    """Transport returning canned responses and recording every request"""

    def __init__(self, responses=None, handler: Optional[Callable] = None):
        self.responses: List = list(responses or [])
        self.handler = handler
        self.requests: List[requests.PreparedRequest] = []

    @property
    def calls(self) -> int:
        return len(self.requests)

    def send(self, request: requests.PreparedRequest, token: CancellationToken) -> requests.Response:
        token.raise_if_cancelled()
        self.requests.append(request)
        if self.handler is not None:
            return self.handler(request, token)
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        item.url = request.url
        return item


@pytest.fixture
def make_response():
    return _make_response


@pytest.fixture
def sleeps(monkeypatch):
    """Replace waits with a recorder that still honors cancellation"""
    recorded: List[float] = []

    def fake_sleep(self, seconds):
        self.raise_if_cancelled()
        recorded.append(float(seconds))
        self.raise_if_cancelled()

    monkeypatch.setattr(CancellationToken, "sleep", fake_sleep)
    return recorded
