"""FastAPI application factory."""

from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request

from api.handlers import handle_form, handle_page
from core.config import Config
from core.normalize import SECURE_SCHEME
from core.protocols import RelayLogger
from services.forwarder import ForwardingExecutor


def create_app(
    config: Config,
    logger: RelayLogger,
    *,
    default_scheme: str = SECURE_SCHEME,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    ``default_scheme`` and ``transport`` exist for test harnesses; the CLI
    leaves both at their defaults.
    """
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.default_scheme = default_scheme
        app.state.executor = ForwardingExecutor(
            logger,
            config.upstream.user_agent,
            max_redirects=config.upstream.max_redirects,
            timeout=config.upstream.timeout,
            transport=transport,
        )
        yield

    app = FastAPI(title="Page Relay", version="0.1.0", lifespan=lifespan)

    @app.get("/pages/{page:path}")
    async def proxy_page(request: Request, page: str):
        return await handle_page(request, page, logger)

    @app.get("/{path:path}")
    async def proxy_form(path: str):
        return await handle_form()

    return app
