"""Network and console recording endpoints."""

from fastapi import APIRouter, Request
from fastapi.responses import Response

from pagetap import ops
from pagetap.api.responses import URL_REQUIRED, error_response, run_operation

router = APIRouter()


@router.get("/network")
async def network(request: Request, url: str | None = None) -> Response:
    """Requests sent while the page loads.

    Usage: GET /network?url=http://localhost:3000
    """
    if not url:
        return error_response(URL_REQUIRED, status_code=400)
    return await run_operation(request, ops.monitor_network, url)


@router.get("/logs")
async def logs(request: Request, url: str | None = None) -> Response:
    """Console messages logged while the page loads.

    Usage: GET /logs?url=http://localhost:3000
    """
    if not url:
        return error_response(URL_REQUIRED, status_code=400)
    return await run_operation(request, ops.console_logs, url)
