"""Chrome DevTools Protocol client scoped to one operation.

One WebSocket per session, one session per request. Nothing is pooled or reused.

PUBLIC API:
  - CDPSession: Minimal CDP client with command futures and event subscription
  - open_session: Context manager that connects and always disconnects
"""

from pagetap.cdp.session import CDPSession, open_session

__all__ = ["CDPSession", "open_session"]
