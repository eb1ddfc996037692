"""Page data endpoints: metrics, info, storage, accessibility, script execution."""

from fastapi import APIRouter, Request
from fastapi.responses import Response
from pydantic import ValidationError

from pagetap import ops
from pagetap.api.models import ExecuteRequest
from pagetap.api.responses import URL_AND_CODE_REQUIRED, URL_REQUIRED, error_response, run_operation

router = APIRouter()


@router.get("/metrics")
async def metrics(request: Request, url: str | None = None) -> Response:
    """Performance counters after load.

    Usage: GET /metrics?url=http://localhost:3000
    """
    if not url:
        return error_response(URL_REQUIRED, status_code=400)
    return await run_operation(request, ops.performance_metrics, url)


@router.get("/pageinfo")
async def pageinfo(request: Request, url: str | None = None) -> Response:
    """Title, meta tags, links and images.

    Usage: GET /pageinfo?url=http://localhost:3000
    """
    if not url:
        return error_response(URL_REQUIRED, status_code=400)
    return await run_operation(request, ops.page_info, url)


@router.post("/execute")
async def execute(request: Request) -> Response:
    """Evaluate JavaScript on the page and return its value.

    Usage: POST /execute with JSON body {"url": "...", "code": "..."}
    """
    try:
        payload = ExecuteRequest.model_validate(await request.json())
    except (ValueError, ValidationError):
        return error_response(URL_AND_CODE_REQUIRED, status_code=400)

    if not payload.url or not payload.code:
        return error_response(URL_AND_CODE_REQUIRED, status_code=400)
    return await run_operation(request, ops.execute_script, payload.url, payload.code)


@router.get("/storage")
async def storage(request: Request, url: str | None = None) -> Response:
    """Cookies, localStorage and sessionStorage.

    Usage: GET /storage?url=http://localhost:3000
    """
    if not url:
        return error_response(URL_REQUIRED, status_code=400)
    return await run_operation(request, ops.storage_snapshot, url)


@router.get("/accessibility")
async def accessibility(request: Request, url: str | None = None) -> Response:
    """Structural accessibility summary.

    Usage: GET /accessibility?url=http://localhost:3000
    """
    if not url:
        return error_response(URL_REQUIRED, status_code=400)
    return await run_operation(request, ops.accessibility_check, url)
