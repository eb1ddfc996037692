"""Screenshot and PDF endpoints."""

from fastapi import APIRouter, Request
from fastapi.responses import Response

from pagetap import ops
from pagetap.api.responses import URL_REQUIRED, error_response, pdf_result, png_result, run_operation

router = APIRouter()


@router.get("/screenshot")
async def screenshot(request: Request, url: str | None = None) -> Response:
    """PNG of the page at a 1200x800 viewport.

    Usage: GET /screenshot?url=http://localhost:3000
    """
    if not url:
        return error_response(URL_REQUIRED, status_code=400)
    return await run_operation(request, ops.capture_screenshot, url, render=png_result)


@router.get("/fullscreenshot")
async def full_screenshot(request: Request, url: str | None = None) -> Response:
    """PNG of the whole scrollable document.

    Usage: GET /fullscreenshot?url=http://localhost:3000
    """
    if not url:
        return error_response(URL_REQUIRED, status_code=400)
    return await run_operation(request, ops.full_page_screenshot, url, render=png_result)


@router.get("/pdf")
async def pdf(request: Request, url: str | None = None) -> Response:
    """Page rendered to PDF, served as the attachment page.pdf.

    Usage: GET /pdf?url=http://localhost:3000
    """
    if not url:
        return error_response(URL_REQUIRED, status_code=400)
    return await run_operation(request, ops.generate_pdf, url, render=pdf_result)
