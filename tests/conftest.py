import json
from typing import Any, Callable

import httpx
import pytest

from core.config import Settings


class RecordingTransport(httpx.MockTransport):
    """MockTransport that remembers every request it served."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]):
        self.requests: list[httpx.Request] = []

        def _record(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        super().__init__(_record)

    @property
    def last_body(self) -> dict[str, Any]:
        return json.loads(self.requests[-1].content)


@pytest.fixture
def settings() -> Settings:
    return Settings(api_token="test-token")


@pytest.fixture
def ok_transport() -> RecordingTransport:
    """Upstream that answers every POST with 200 and a small JSON document."""
    return RecordingTransport(lambda request: httpx.Response(200, json={"rows": [1, 2, 3]}))


@pytest.fixture
def failing_transport() -> RecordingTransport:
    """Upstream that answers every POST with 500 "server error"."""
    return RecordingTransport(lambda request: httpx.Response(500, text="server error"))


@pytest.fixture
def make_transport() -> Callable[..., RecordingTransport]:
    """Factory for a RecordingTransport with a custom handler."""
    return RecordingTransport
