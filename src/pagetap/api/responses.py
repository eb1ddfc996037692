"""Map operation results to HTTP responses.

PUBLIC API:
  - URL_REQUIRED, URL_AND_CODE_REQUIRED: Validation messages
  - error_response: JSON {error} with a status code
  - json_result: 200 JSON of a successful result
  - png_result, pdf_result: Decoded binary results
  - run_operation: Dispatch an operation off the event loop and render its result
"""

import asyncio
import base64
import logging
from typing import Any, Callable

from fastapi import Request
from fastapi.responses import JSONResponse, Response

from pagetap.ops import OperationResult

logger = logging.getLogger(__name__)

URL_REQUIRED = "url query parameter is required"
URL_AND_CODE_REQUIRED = "url and code parameters are required"

Renderer = Callable[[OperationResult], Response]


def error_response(message: str, status_code: int = 500) -> JSONResponse:
    """JSON error body: {"error": message}."""
    return JSONResponse({"error": message}, status_code=status_code)


def json_result(result: OperationResult) -> Response:
    return JSONResponse(result.to_dict())


def png_result(result: OperationResult) -> Response:
    return Response(content=base64.b64decode(result.payload["data"]), media_type="image/png")


def pdf_result(result: OperationResult) -> Response:
    return Response(
        content=base64.b64decode(result.payload["data"]),
        media_type="application/pdf",
        headers={"Content-Disposition": 'attachment; filename="page.pdf"'},
    )


async def run_operation(
    request: Request,
    operation: Callable[..., OperationResult],
    *args: Any,
    render: Renderer = json_result,
) -> Response:
    """Run a blocking operation in a worker thread and build its response.

    Failure results and exceptions raised by the dispatch both become 500s.

    Args:
        request: Incoming request, used for the app's settings.
        operation: Operation from pagetap.ops.
        *args: Operation arguments, target URL first.
        render: Builds the success response.

    Returns:
        Rendered success response or JSON error.
    """
    settings = request.app.state.settings
    name = getattr(operation, "__name__", "operation")

    try:
        result = await asyncio.to_thread(operation, *args, settings=settings)
        if not result.success:
            return error_response(result.error or "Operation failed")
        return render(result)
    except Exception as e:
        logger.exception(f"{name} raised during dispatch")
        return error_response(str(e))
