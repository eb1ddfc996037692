"""Data extraction: performance counters, page info, storage, accessibility, user scripts."""

import logging

from pagetap.cdp import CDPSession
from pagetap.config import Settings
from pagetap.errors import ScriptError
from pagetap.ops._base import evaluate, load_page, operation

logger = logging.getLogger(__name__)

_PAGE_INFO_JS = """({
    title: document.title,
    description: document.querySelector('meta[name="description"]')?.content || '',
    ogTitle: document.querySelector('meta[property="og:title"]')?.content || '',
    ogDescription: document.querySelector('meta[property="og:description"]')?.content || '',
    ogImage: document.querySelector('meta[property="og:image"]')?.content || '',
    links: Array.from(document.querySelectorAll('a')).map(a => ({text: a.textContent, href: a.href})),
    images: Array.from(document.querySelectorAll('img')).map(img => ({src: img.src, alt: img.alt}))
})"""

_ACCESSIBILITY_JS = """({
    missingAlt: document.querySelectorAll('img:not([alt])').length,
    missingLabels: document.querySelectorAll('input:not([aria-label]):not([id])').length,
    lowContrast: 0,
    headingStructure: Array.from(document.querySelectorAll('h1, h2, h3, h4, h5, h6'))
        .map(h => ({tag: h.tagName, text: h.textContent.substring(0, 50)})),
    buttons: Array.from(document.querySelectorAll('button, [role="button"]'))
        .map(b => ({text: b.textContent.substring(0, 50), ariaLabel: b.getAttribute('aria-label')})),
    links: Array.from(document.querySelectorAll('a'))
        .map(a => ({text: a.textContent.substring(0, 50), title: a.getAttribute('title')}))
})"""

_STORAGE_ENTRIES_JS = "Object.fromEntries(Object.entries({storage}))"


@operation
def performance_metrics(cdp: CDPSession, url: str, *, settings: Settings) -> dict:
    """Performance counters after load, as {name: value}."""
    cdp.execute("Performance.enable")
    load_page(cdp, url, settings.load_timeout)

    response = cdp.execute("Performance.getMetrics")
    return {"metrics": {m["name"]: m["value"] for m in response.get("metrics", [])}}


@operation
def page_info(cdp: CDPSession, url: str, *, settings: Settings) -> dict:
    """Title, description and Open Graph tags, links and images."""
    cdp.execute("Runtime.enable")
    load_page(cdp, url, settings.load_timeout)

    return {"pageInfo": evaluate(cdp, _PAGE_INFO_JS)}


@operation
def execute_script(cdp: CDPSession, url: str, code: str, *, settings: Settings) -> dict:
    """Evaluate caller code after load. A thrown exception fails the operation with its text."""
    cdp.execute("Runtime.enable")
    load_page(cdp, url, settings.load_timeout)

    return {"result": evaluate(cdp, code)}


@operation
def storage_snapshot(cdp: CDPSession, url: str, *, settings: Settings) -> dict:
    """Cookie string plus localStorage and sessionStorage entries."""
    cdp.execute("Runtime.enable")
    load_page(cdp, url, settings.load_timeout)

    return {
        "cookies": _read_storage(cdp, "document.cookie", ""),
        "localStorage": _read_storage(cdp, _STORAGE_ENTRIES_JS.format(storage="localStorage"), {}),
        "sessionStorage": _read_storage(cdp, _STORAGE_ENTRIES_JS.format(storage="sessionStorage"), {}),
    }


def _read_storage(cdp: CDPSession, expression: str, empty):
    """Evaluate one storage read, or return empty when the page denies access.

    Opaque origins (data: URLs, sandboxed documents) throw SecurityError on
    document.cookie and the Storage getters.
    """
    try:
        return evaluate(cdp, expression) or empty
    except ScriptError as e:
        logger.info(f"Storage read denied ({expression}): {e}")
        return empty


@operation
def accessibility_check(cdp: CDPSession, url: str, *, settings: Settings) -> dict:
    """Structural counts: images without alt, unlabeled inputs, headings, buttons, links."""
    cdp.execute("Runtime.enable")
    load_page(cdp, url, settings.load_timeout)

    return {"accessibility": evaluate(cdp, _ACCESSIBILITY_JS)}
