"""End-to-end tests through the FastAPI app with an in-process upstream."""

from urllib.parse import quote

import httpx
import pytest
from fastapi.testclient import TestClient

from app import create_app
from core.config import Config
from core.headers import GOOGLEBOT_USER_AGENT
from core.normalize import INSECURE_SCHEME
from services import forwarder

UPSTREAM_URL = "http://upstream.test"


def page_path(target: str) -> str:
    return "/pages/" + quote(target, safe="")


@pytest.fixture
def client(upstream, relay_logger):
    app = create_app(
        Config(),
        relay_logger,
        default_scheme=INSECURE_SCHEME,
        transport=upstream.transport,
    )
    with TestClient(app) as test_client:
        yield test_client


def test_page_is_relayed_with_crawler_identity(client, upstream):
    response = client.get(page_path(UPSTREAM_URL + "/test"), headers={"User-Agent": "curl/8.0"})

    assert response.status_code == 200
    assert response.text == "TEST"
    assert upstream.requests[0].headers["user-agent"] == GOOGLEBOT_USER_AGENT


def test_inbound_headers_are_forwarded(client, upstream):
    client.get(page_path(UPSTREAM_URL + "/test"), headers={"X-Custom": "kept"})

    seen = upstream.requests[0]
    assert seen.headers["x-custom"] == "kept"
    assert seen.headers["host"] == "upstream.test"


def test_error_status_is_passed_through(client):
    response = client.get(page_path(UPSTREAM_URL + "/410"))

    assert response.status_code == 410
    assert response.text == "GONE"


def test_target_without_scheme(client, upstream):
    response = client.get(page_path("upstream.test/test"))

    assert response.status_code == 200
    assert response.text == "TEST"
    assert str(upstream.requests[0].url) == UPSTREAM_URL + "/test"


def test_unencoded_target_path(client):
    response = client.get("/pages/upstream.test/test")

    assert response.status_code == 200
    assert response.text == "TEST"


def test_malformed_encoding_is_rejected_before_fetch(client, upstream, relay_logger):
    response = client.get(page_path("%%%%%%"))

    assert response.status_code == 400
    assert "Invalid Origin URL" in response.text
    assert upstream.requests == []
    assert relay_logger.errors[0][0] == "normalize"
    assert "MalformedEncoding" in relay_logger.errors[0][1]


def test_empty_target_is_rejected(client, upstream):
    response = client.get("/pages/")

    assert response.status_code == 400
    assert upstream.requests == []


def test_upstream_headers_replace_response_headers(client, upstream):
    upstream.routes["/cookies"] = lambda request: httpx.Response(
        200,
        headers=[("Set-Cookie", "a=1"), ("Set-Cookie", "b=2"), ("Cache-Control", "max-age=60")],
        stream=httpx.ByteStream(b"ok"),
    )

    response = client.get(page_path(UPSTREAM_URL + "/cookies"))

    assert response.headers.get_list("set-cookie") == ["a=1", "b=2"]
    assert response.headers["cache-control"] == "max-age=60"
    assert "content-type" not in response.headers


def test_transport_failure_has_no_body(client, upstream, relay_logger):
    def refuse(request):
        raise httpx.ConnectError("connection refused", request=request)

    upstream.routes["/down"] = refuse

    response = client.get(page_path(UPSTREAM_URL + "/down"))

    assert response.status_code == 502
    assert response.content == b""
    assert relay_logger.errors == [("fetch", f"{UPSTREAM_URL}/down: connection refused")]


def test_request_build_failure_is_500(client, upstream, relay_logger, monkeypatch):
    def broken_headers(inbound, user_agent):
        raise ValueError("header value is not ASCII")

    monkeypatch.setattr(forwarder, "build_forward_headers", broken_headers)

    response = client.get(page_path(UPSTREAM_URL + "/test"))

    assert response.status_code == 500
    assert "Internal Server Error" in response.text
    assert upstream.requests == []
    assert relay_logger.errors[0][0] == "build_request"


def test_redirect_limit_from_config(upstream, relay_logger):
    upstream.routes["/loop"] = lambda request: httpx.Response(
        302, headers={"Location": "/loop"}, stream=httpx.ByteStream(b"MOVED")
    )
    config = Config()
    config.upstream.max_redirects = 2
    app = create_app(config, relay_logger, default_scheme=INSECURE_SCHEME, transport=upstream.transport)

    with TestClient(app) as test_client:
        response = test_client.get(page_path(UPSTREAM_URL + "/loop"), follow_redirects=False)

    assert response.status_code == 302
    assert response.text == "MOVED"
    assert "location" not in response.headers
    assert len(upstream.requests) == 2


def test_form_is_served(client, upstream):
    for path in ("/", "/anything/else"):
        response = client.get(path)
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/html")
        assert "/pages/" in response.text
    assert upstream.requests == []


def test_upstream_sees_inbound_headers_only(client, upstream):
    response = client.get(
        page_path(UPSTREAM_URL + "/test"),
        headers={"Accept": "text/html", "X-Custom": "kept"},
    )
    inbound = {key for key, _ in response.request.headers.multi_items()}

    assert response.status_code == 200
    seen = {key for key, _ in upstream.requests[0].headers.multi_items()}
    assert seen == inbound | {"host", "user-agent"}


def test_non_ascii_header_is_forwarded(client, upstream, relay_logger):
    response = client.get(
        page_path(UPSTREAM_URL + "/test"),
        headers={"X-Name": "café".encode("latin-1")},
    )

    assert response.status_code == 200
    assert response.text == "TEST"
    assert [key for key, _ in upstream.requests[0].headers.raw].count(b"x-name") == 1
    assert relay_logger.errors == []
