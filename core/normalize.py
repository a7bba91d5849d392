"""Target URL recovery from the request path."""

import re
from urllib.parse import unquote

import httpx

from core.exceptions import EmptyTarget, MalformedEncoding, UnparsableURL

SECURE_SCHEME = "https://"
INSECURE_SCHEME = "http://"

_SCHEME_RE = re.compile(r"^https?://", re.IGNORECASE)
_BAD_ESCAPE_RE = re.compile(r"%(?![0-9A-Fa-f]{2})")


def percent_decode(raw: str) -> str:
    """Strictly percent-decode a path segment."""
    match = _BAD_ESCAPE_RE.search(raw)
    if match:
        raise MalformedEncoding(
            f"invalid URL escape {raw[match.start():match.start() + 3]!r}", raw
        )
    # Percent escapes only: "+" stays "+" so query strings in the target survive
    try:
        return unquote(raw, errors="strict")
    except UnicodeDecodeError as e:
        raise MalformedEncoding(f"escape sequence is not valid UTF-8: {e}", raw) from e


def normalize_target(raw: str, default_scheme: str = SECURE_SCHEME) -> httpx.URL:
    """Rebuild an absolute http(s) URL from a raw path segment.

    Args:
        raw: Path parameter as delivered by the router.
        default_scheme: Prefix used when the target carries no scheme,
            e.g. ``"https://"``.

    Returns:
        The parsed target URL.

    Raises:
        MalformedEncoding: Percent-decoding failed.
        EmptyTarget: Nothing left to fetch.
        UnparsableURL: Result is not an absolute http(s) URL with a host.

    Only one leading slash is stripped, so ``"//host/path"`` becomes
    ``"<default_scheme>/host/path"``. That has an empty authority and is
    rejected as ``UnparsableURL`` instead of failing later in the transport.
    """
    target = percent_decode(raw)
    if not target:
        raise EmptyTarget("empty URL", raw)

    # The router hands over the segment with its leading separator
    if target.startswith("/"):
        target = target[1:]

    if not _SCHEME_RE.match(target):
        target = default_scheme + target

    try:
        url = httpx.URL(target)
    except httpx.InvalidURL as e:
        raise UnparsableURL(str(e), raw) from e

    if url.scheme.lower() not in ("http", "https"):
        raise UnparsableURL(f"unsupported scheme {url.scheme!r}", raw)
    if not url.host:
        raise UnparsableURL(f"no host in URL {target!r}", raw)
    return url
