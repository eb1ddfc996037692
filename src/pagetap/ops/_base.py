"""Shared lifecycle for page operations.

Every operation runs the same sequence: open a session, configure it, load the
page, collect, release. The ``operation`` decorator owns the acquire/release and
the conversion of any exception into a failure result; the wrapped function only
configures, loads and collects.
"""

import functools
import logging
import threading
from concurrent.futures import TimeoutError
from dataclasses import dataclass, field
from typing import Any, Callable

from pagetap.cdp import CDPSession, open_session
from pagetap.config import Settings, get_settings
from pagetap.errors import NavigationError, ScriptError

logger = logging.getLogger(__name__)

# Fixed viewport for screenshot operations
VIEWPORT = {"width": 1200, "height": 800, "deviceScaleFactor": 1, "mobile": False}


@dataclass(frozen=True)
class OperationResult:
    """Outcome of an operation: a payload on success, a message on failure.

    Attributes:
        success: Whether the operation completed.
        url: Target URL, echoed on success.
        payload: Operation-specific fields.
        error: Failure message.
    """

    success: bool
    url: str | None = None
    payload: dict[str, Any] = field(default_factory=dict)
    error: str | None = None

    @classmethod
    def ok(cls, url: str, **payload: Any) -> "OperationResult":
        return cls(success=True, url=url, payload=payload)

    @classmethod
    def fail(cls, error: str) -> "OperationResult":
        return cls(success=False, error=error)

    def to_dict(self) -> dict[str, Any]:
        """JSON body for this result."""
        if not self.success:
            return {"success": False, "error": self.error}
        return {"success": True, "url": self.url, **self.payload}


def load_page(cdp: CDPSession, url: str, timeout: float | None = None) -> dict:
    """Navigate and block until this navigation's document fires its load event.

    The load is matched on the navigation's loaderId through Page.lifecycleEvent, so a
    late load from the tab's previous document (about:blank) cannot end the wait.
    Neither the navigate command nor the load wait is bounded by command_timeout.

    Args:
        cdp: Connected session.
        url: Target URL.
        timeout: Seconds to wait for load, None waits until load or disconnect.

    Returns:
        Page.navigate result (frameId, loaderId).

    Raises:
        NavigationError: If Chrome reports an errorText for the navigation.
        TimeoutError: If timeout elapses before the load event.
    """
    cdp.execute("Page.enable")
    cdp.execute("Page.setLifecycleEventsEnabled", {"enabled": True})

    # Loads can arrive before the navigate response names its loaderId
    lock = threading.Lock()
    seen_loads = set()
    expected = {}

    def is_our_load(params: dict) -> bool:
        if params.get("name") != "load":
            return False
        with lock:
            seen_loads.add(params.get("loaderId"))
            return "loaderId" in expected and expected["loaderId"] in seen_loads

    loaded = cdp.wait_for("Page.lifecycleEvent", is_our_load)

    try:
        result = cdp.send("Page.navigate", {"url": url}).result(timeout=timeout)
    except TimeoutError:
        raise TimeoutError(f"Page load timed out after {timeout}s: {url}")
    if error_text := result.get("errorText"):
        raise NavigationError(f"Navigation to {url} failed: {error_text}")

    # Same-document navigations have no loaderId and no new load event
    loader_id = result.get("loaderId")
    if not loader_id:
        return result

    with lock:
        expected["loaderId"] = loader_id
        already_loaded = loader_id in seen_loads

    if not already_loaded:
        try:
            loaded.result(timeout=timeout)
        except TimeoutError:
            raise TimeoutError(f"Page load timed out after {timeout}s: {url}")
    return result


def evaluate(cdp: CDPSession, expression: str, return_by_value: bool = True) -> Any:
    """Evaluate JavaScript in the page and return its value.

    Raises:
        ScriptError: If the expression throws.
    """
    response = cdp.execute("Runtime.evaluate", {"expression": expression, "returnByValue": return_by_value})
    if details := response.get("exceptionDetails"):
        raise ScriptError.from_details(details)
    return response.get("result", {}).get("value")


def operation(func: Callable[..., dict]) -> Callable[..., OperationResult]:
    """Run func inside a fresh session and wrap its payload in an OperationResult.

    The wrapped function receives ``(cdp, url, *args, settings=...)`` and returns
    the payload dict. The public function takes ``(url, *args, settings=None)``.
    """

    @functools.wraps(func)
    def wrapper(url: str, *args: Any, settings: Settings | None = None) -> OperationResult:
        settings = settings or get_settings()
        try:
            with open_session(settings) as cdp:
                payload = func(cdp, url, *args, settings=settings)
        except Exception as e:
            logger.warning(f"{func.__name__} failed for {url}: {e}")
            return OperationResult.fail(str(e) or type(e).__name__)
        return OperationResult.ok(url, **payload)

    return wrapper
