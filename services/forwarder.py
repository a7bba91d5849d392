"""Upstream fetch and response transcription."""

from typing import AsyncIterator, Awaitable, Callable, Iterable

import httpx
from fastapi import Response
from fastapi.responses import StreamingResponse
from starlette.types import Receive, Scope, Send

from core.exceptions import RequestBuildFailed
from core.headers import GOOGLEBOT_USER_AGENT, build_forward_headers
from core.protocols import RelayLogger


class ForwardingExecutor:
    """Fetch a target on the caller's behalf and relay the upstream reply."""

    def __init__(
        self,
        logger: RelayLogger,
        user_agent: str = GOOGLEBOT_USER_AGENT,
        *,
        max_redirects: int = 10,
        timeout: float = 5.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._logger = logger
        self._user_agent = user_agent
        self._max_redirects = max_redirects
        self._timeout = timeout
        self._transport = transport

    async def forward(
        self,
        target: httpx.URL,
        inbound_headers: Iterable[tuple[bytes | str, bytes | str]],
    ) -> Response:
        """GET ``target`` and transcribe the result.

        Raises:
            RequestBuildFailed: The outbound request could not be constructed.
        """
        # One client per request, so no cookie jar is shared between callers
        client = httpx.AsyncClient(
            transport=self._transport,
            timeout=self._timeout,
            follow_redirects=False,
        )
        # Upstream sees the inbound headers only, not httpx's defaults
        client.headers.clear()
        try:
            request = client.build_request(
                "GET",
                target,
                headers=build_forward_headers(inbound_headers, self._user_agent),
            )
        except (httpx.InvalidURL, TypeError, ValueError) as e:
            await client.aclose()
            raise RequestBuildFailed(str(e)) from e

        try:
            response, failure = await self._fetch(client, request)
        except httpx.HTTPError as e:
            self._logger.log_error("fetch", f"{target}: {e}")
            await client.aclose()
            # Nothing to relay; the status line is all the boundary can send
            return Response(status_code=502)
        except BaseException:
            await client.aclose()
            raise

        if failure is not None:
            self._logger.log_error("fetch", f"{target}: {failure}")
            return self._relay(response, client, target, headers=None)

        self._logger.log_fetch(str(target), response.status_code, request.headers.multi_items())
        return self._relay(response, client, target, headers=response.headers.raw)

    async def _fetch(
        self,
        client: httpx.AsyncClient,
        request: httpx.Request,
    ) -> tuple[httpx.Response, httpx.TooManyRedirects | None]:
        """Send the request, following redirects up to the configured limit.

        When the limit is hit, the last redirect response is returned together
        with the error instead of being discarded.
        """
        response = await client.send(request, stream=True)
        redirects = 0
        while response.next_request is not None:
            # The limit counts requests made, so at most max_redirects reach upstream
            if redirects + 1 >= self._max_redirects:
                return response, httpx.TooManyRedirects(
                    f"stopped after {self._max_redirects} redirects",
                    request=response.request,
                )
            redirects += 1
            next_request = response.next_request
            await response.aclose()
            response = await client.send(next_request, stream=True)
        return response, None

    def _relay(
        self,
        response: httpx.Response,
        client: httpx.AsyncClient,
        target: httpx.URL,
        headers: list[tuple[bytes, bytes]] | None,
    ) -> StreamingResponse:
        """Stream an upstream response back with its status and headers."""
        relayed = UpstreamStreamingResponse(
            self._relay_body(response, client, target),
            status_code=response.status_code,
            cleanup=lambda: self._cleanup(response, client),
        )
        # Upstream headers replace the outbound set wholesale, duplicates kept in order
        relayed.raw_headers = [(key.lower(), value) for key, value in headers or []]
        return relayed

    async def _relay_body(
        self,
        response: httpx.Response,
        client: httpx.AsyncClient,
        target: httpx.URL,
    ) -> AsyncIterator[bytes]:
        """Yield upstream body bytes exactly as received."""
        try:
            async for chunk in response.aiter_raw():
                yield chunk
        except (httpx.HTTPError, httpx.StreamError) as e:
            # Status line is already committed
            self._logger.log_error("relay_body", f"{target}: {e}")
        finally:
            await self._cleanup(response, client)

    async def _cleanup(self, response: httpx.Response, client: httpx.AsyncClient) -> None:
        """Clean up streaming resources."""
        await response.aclose()
        await client.aclose()


class UpstreamStreamingResponse(StreamingResponse):
    """StreamingResponse that releases the upstream even if the body never ran.

    Starlette skips background tasks when the client disconnects, and never
    starts the body iterator when sending the status line fails.
    """

    def __init__(
        self,
        content: AsyncIterator[bytes],
        status_code: int,
        cleanup: Callable[[], Awaitable[None]],
    ) -> None:
        super().__init__(content, status_code=status_code)
        self._cleanup = cleanup

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        try:
            await super().__call__(scope, receive, send)
        finally:
            await self._cleanup()
