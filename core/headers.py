"""Header construction for upstream requests."""

from typing import Iterable

import httpx

GOOGLEBOT_USER_AGENT = (
    "Mozilla/5.0 (Linux; Android 6.0.1; Nexus 5X Build/MMB29P) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/127.0.6533.119 Mobile Safari/537.36 "
    "(compatible; Googlebot/2.1; +http://www.google.com/bot.html)"
)

IDENTITY_HEADER = "User-Agent"

# Derived by the transport from the target URL and the (empty) request body
TRANSPORT_HEADERS = frozenset({"host", "content-length"})


def build_forward_headers(
    inbound: Iterable[tuple[bytes | str, bytes | str]],
    user_agent: str = GOOGLEBOT_USER_AGENT,
) -> httpx.Headers:
    """Copy inbound headers and force the crawler identity.

    Pass raw ``bytes`` pairs to forward values byte for byte; httpx only
    encodes ``str`` values, and only as ASCII.
    """
    headers = httpx.Headers(
        [(key, value) for key, value in inbound if _name(key) not in TRANSPORT_HEADERS]
    )
    # Replaces every inbound value for the key
    headers[IDENTITY_HEADER] = user_agent
    return headers


def _name(key: bytes | str) -> str:
    if isinstance(key, bytes):
        key = key.decode("latin-1")
    return key.lower()
