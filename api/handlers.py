"""FastAPI route handlers."""

from fastapi import Request, Response
from fastapi.responses import HTMLResponse

from api.form import INDEX_HTML
from core.exceptions import InputError, RequestBuildFailed
from core.normalize import normalize_target
from core.protocols import RelayLogger

INVALID_ORIGIN_HTML = "<h1>Invalid Origin URL</h1>"
INTERNAL_ERROR_HTML = "<h1>Internal Server Error</h1>"


async def handle_page(request: Request, page: str, logger: RelayLogger) -> Response:
    """Relay the page named by the path parameter."""
    try:
        target = normalize_target(page, request.app.state.default_scheme)
    except InputError as e:
        logger.log_error("normalize", f"{type(e).__name__}: {e}")
        return HTMLResponse(INVALID_ORIGIN_HTML, status_code=400)

    executor = request.app.state.executor
    try:
        return await executor.forward(target, request.headers.raw)
    except RequestBuildFailed as e:
        logger.log_error("build_request", f"{target}: {e}")
        return HTMLResponse(INTERNAL_ERROR_HTML, status_code=500)


async def handle_form() -> Response:
    """Serve the page entry form."""
    return HTMLResponse(INDEX_HTML)
