"""Exception types raised by the CDP client and page operations.

Operations never let these escape: they are caught by the operation wrapper and
turned into failure results carrying ``str(exc)``.

PUBLIC API:
  - PagetapError: Base class for all pagetap errors
  - CDPError: Error response returned by Chrome for a command
  - ConnectionClosedError: WebSocket closed while work was pending
  - NavigationError: Page.navigate reported an errorText
  - ScriptError: Runtime.evaluate threw in the page
"""


class PagetapError(RuntimeError):
    """Base class for pagetap errors."""


class CDPError(PagetapError):
    """Chrome answered a command with an error object.

    Attributes:
        code: CDP error code (e.g. -32000).
        message: Error message from Chrome.
    """

    def __init__(self, code: int | None, message: str):
        super().__init__(message)
        self.code = code
        self.message = message

    @classmethod
    def from_response(cls, error: dict | str) -> "CDPError":
        """Build from the 'error' field of a CDP response."""
        if isinstance(error, dict):
            return cls(error.get("code"), error.get("message") or str(error))
        return cls(None, str(error))


class ConnectionClosedError(PagetapError):
    """Connection to Chrome closed before a response or event arrived."""

    def __init__(self, message: str = "Connection closed"):
        super().__init__(message)


class NavigationError(PagetapError):
    """Navigation failed before the page could load."""


class ScriptError(PagetapError):
    """JavaScript evaluation threw an exception in the page."""

    @classmethod
    def from_details(cls, details: dict) -> "ScriptError":
        """Build from Runtime.evaluate exceptionDetails, preferring the exception description."""
        exception = details.get("exception") or {}
        text = exception.get("description") or exception.get("value") or details.get("text") or str(details)
        return cls(str(text))


__all__ = ["PagetapError", "CDPError", "ConnectionClosedError", "NavigationError", "ScriptError"]
