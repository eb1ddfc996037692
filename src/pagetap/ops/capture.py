"""Binary captures: viewport screenshot, full-page screenshot, PDF."""

import math

from pagetap.cdp import CDPSession
from pagetap.config import Settings
from pagetap.ops._base import VIEWPORT, load_page, operation

# US Letter, half-inch margins
PDF_OPTIONS = {
    "landscape": False,
    "displayHeaderFooter": False,
    "scale": 1.0,
    "paperWidth": 8.5,
    "paperHeight": 11,
    "marginTop": 0.5,
    "marginBottom": 0.5,
    "marginLeft": 0.5,
    "marginRight": 0.5,
}


@operation
def capture_screenshot(cdp: CDPSession, url: str, *, settings: Settings) -> dict:
    """PNG of the 1200x800 viewport after load."""
    cdp.execute("Emulation.setDeviceMetricsOverride", VIEWPORT)
    load_page(cdp, url, settings.load_timeout)

    screenshot = cdp.execute("Page.captureScreenshot", {"format": "png"})
    return {"data": screenshot["data"], "format": "png"}


def _content_height(layout: dict) -> int:
    """Document height in CSS pixels from Page.getLayoutMetrics."""
    size = layout.get("cssContentSize") or layout["contentSize"]
    return int(math.ceil(size["height"]))


@operation
def full_page_screenshot(cdp: CDPSession, url: str, *, settings: Settings) -> dict:
    """PNG of the whole document.

    Loads at the default viewport, measures the content height, then grows the
    viewport to that height and captures again.
    """
    cdp.execute("Emulation.setDeviceMetricsOverride", VIEWPORT)
    load_page(cdp, url, settings.load_timeout)

    height = _content_height(cdp.execute("Page.getLayoutMetrics"))
    cdp.execute("Emulation.setDeviceMetricsOverride", {**VIEWPORT, "height": height})

    screenshot = cdp.execute("Page.captureScreenshot", {"format": "png", "fromSurface": True})
    return {"data": screenshot["data"], "format": "png", "height": height}


@operation
def generate_pdf(cdp: CDPSession, url: str, *, settings: Settings) -> dict:
    """Paginated PDF. Chrome only prints to PDF when running headless."""
    load_page(cdp, url, settings.load_timeout)

    pdf = cdp.execute("Page.printToPDF", PDF_OPTIONS)
    return {"data": pdf["data"], "format": "pdf"}
