# Make `import core.*`, `import services.*` etc. work from test modules that
# live beside the code they test.
import os
import sys

import httpx
import pytest

SERVICE_ROOT = os.path.dirname(__file__)
if SERVICE_ROOT not in sys.path:
    sys.path.insert(0, SERVICE_ROOT)


class RecordingLogger:
    """RelayLogger that keeps every event for assertions."""

    def __init__(self):
        self.fetches: list[tuple[str, int, list[tuple[str, str]]]] = []
        self.errors: list[tuple[str, str]] = []

    def log_fetch(self, url, status, headers=()):
        self.fetches.append((url, status, list(headers)))

    def log_error(self, operation, detail):
        self.errors.append((operation, detail))


class FakeUpstream:
    """In-process upstream server recording every request it receives."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.routes = {
            "/test": lambda request: httpx.Response(200, stream=httpx.ByteStream(b"TEST")),
            "/410": lambda request: httpx.Response(410, stream=httpx.ByteStream(b"GONE")),
        }

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get(request.url.path)
        if route is None:
            return httpx.Response(404, stream=httpx.ByteStream(b""))
        return route(request)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def relay_logger():
    return RecordingLogger()


@pytest.fixture
def upstream():
    return FakeUpstream()
