"""Minimal CDP Session - connect, send/execute, subscribe, disconnect.

WebSocketApp handles the WebSocket, we handle CDP protocol.
"""

import json
import logging
import threading
from collections import defaultdict
from concurrent.futures import Future, TimeoutError
from contextlib import contextmanager
from typing import Any, Callable, Iterator

import requests
import websocket

from pagetap.config import Settings, get_settings
from pagetap.errors import CDPError, ConnectionClosedError, PagetapError

logger = logging.getLogger(__name__)

EventHandler = Callable[[dict], None]
EventPredicate = Callable[[dict], bool]


class CDPSession:
    """Minimal CDP client owned by a single operation.

    No convenience methods, no auto-enable, no reconnect. One session is one
    WebSocket to one page target; when the session created that target it also
    closes it on disconnect.
    """

    def __init__(
        self,
        host: str = "localhost",
        port: int = 9222,
        timeout: float = 30,
        connect_timeout: float = 5,
        new_target: bool = True,
    ):
        """Initialize CDP session.

        Args:
            host: Chrome debugging host
            port: Chrome debugging port
            timeout: Default timeout for execute()
            connect_timeout: Seconds to wait for the WebSocket to open
            new_target: Open a dedicated tab instead of attaching to an existing page
        """
        self.host = host
        self.port = port
        self.timeout = timeout
        self.connect_timeout = connect_timeout
        self.new_target = new_target

        # WebSocketApp instance
        self.ws_app: websocket.WebSocketApp | None = None
        self.ws_thread: threading.Thread | None = None

        # Connection state
        self.connected = threading.Event()
        self.page_info: dict | None = None
        self._created_target_id: str | None = None
        self._last_error: Exception | None = None

        # CDP request/response tracking
        self._next_id = 1
        self._pending: dict[int, Future] = {}
        self._lock = threading.Lock()

        # Event subscribers and one-shot waiters, keyed by CDP method
        self._handlers: dict[str, list[EventHandler]] = defaultdict(list)
        self._waiters: dict[str, list[tuple[Future, EventPredicate | None]]] = defaultdict(list)

    @property
    def base_url(self) -> str:
        return f"http://{self.host}:{self.port}"

    @property
    def is_connected(self) -> bool:
        return self.ws_app is not None and self.connected.is_set()

    def list_pages(self) -> list[dict]:
        """List available Chrome pages.

        Raises:
            PagetapError: If the debugging endpoint cannot be queried.
        """
        try:
            resp = requests.get(f"{self.base_url}/json", timeout=2)
            resp.raise_for_status()
            pages = resp.json()
        except requests.RequestException as e:
            raise PagetapError(f"Failed to list pages: {e}") from e
        return [p for p in pages if p.get("type") == "page" and "webSocketDebuggerUrl" in p]

    def create_target(self) -> dict:
        """Open a blank tab and return its target info."""
        try:
            resp = requests.put(f"{self.base_url}/json/new?about:blank", timeout=2)
            resp.raise_for_status()
            target = resp.json()
        except requests.RequestException as e:
            raise PagetapError(f"Failed to create target: {e}") from e
        if "webSocketDebuggerUrl" not in target:
            raise PagetapError("No webSocketDebuggerUrl for new target")
        return target

    def close_target(self, target_id: str) -> None:
        """Close a tab by target ID. Errors are logged, not raised."""
        try:
            resp = requests.get(f"{self.base_url}/json/close/{target_id}", timeout=2)
            resp.raise_for_status()
        except requests.RequestException as e:
            logger.warning(f"Failed to close target {target_id}: {e}")

    def connect(self, page_index: int = 0) -> None:
        """Connect to a Chrome page. Just establishes connection, no auto-enable.

        Args:
            page_index: Existing page to attach to when new_target is off.

        Raises:
            RuntimeError: If already connected or no page is available.
            TimeoutError: If the WebSocket does not open within connect_timeout.
        """
        if self.ws_app:
            raise RuntimeError("Already connected")

        if self.new_target:
            page = self.create_target()
            self._created_target_id = page.get("id")
        else:
            pages = self.list_pages()
            if not pages:
                raise RuntimeError("No pages available")
            if page_index >= len(pages):
                raise IndexError(f"Page {page_index} out of range")
            page = pages[page_index]

        ws_url = page["webSocketDebuggerUrl"]
        self.page_info = page

        # Create WebSocketApp with callbacks
        self.ws_app = websocket.WebSocketApp(
            ws_url,
            on_open=self._on_open,
            on_message=self._on_message,
            on_error=self._on_error,
            on_close=self._on_close,
        )

        # Let WebSocketApp handle everything in a thread
        self.ws_thread = threading.Thread(
            target=self.ws_app.run_forever,
            kwargs={
                "ping_interval": 30,
                "ping_timeout": 10,
                "skip_utf8_validation": True,
                "suppress_origin": True,
            },
        )
        self.ws_thread.daemon = True
        self.ws_thread.start()

        # Wait for connection
        if not self.connected.wait(timeout=self.connect_timeout):
            reason = f": {self._last_error}" if self._last_error else ""
            self.disconnect()
            raise TimeoutError(f"Failed to connect to Chrome{reason}")

        logger.debug(f"Connected to {ws_url}")

    def disconnect(self) -> None:
        """Disconnect from Chrome and close the tab this session opened. Safe to call twice."""
        with self._lock:
            ws_app = self.ws_app
            self.ws_app = None

        if ws_app:
            ws_app.close()

        if self.ws_thread and self.ws_thread.is_alive():
            self.ws_thread.join(timeout=2)
        self.ws_thread = None

        self.connected.clear()
        self._fail_pending(ConnectionClosedError())

        with self._lock:
            self._handlers.clear()

        if self._created_target_id:
            target_id = self._created_target_id
            self._created_target_id = None
            self.close_target(target_id)

        self.page_info = None

    def send(self, method: str, params: dict | None = None) -> Future:
        """Send CDP command asynchronously.

        Returns a Future. Call future.result(timeout) to get response.

        Args:
            method: CDP method (e.g. "Page.navigate")
            params: Optional parameters

        Returns:
            Future that will contain the 'result' field from CDP response
        """
        if not self.ws_app:
            raise RuntimeError("Not connected")

        with self._lock:
            msg_id = self._next_id
            self._next_id += 1

            future = Future()
            self._pending[msg_id] = future

        # Send CDP command
        message = {"id": msg_id, "method": method}
        if params:
            message["params"] = params

        self.ws_app.send(json.dumps(message))

        return future

    def execute(self, method: str, params: dict | None = None, timeout: float | None = None) -> Any:
        """Send CDP command synchronously.

        Blocks until response received or timeout.

        Args:
            method: CDP method (e.g. "Page.navigate")
            params: Optional parameters
            timeout: Override default timeout

        Returns:
            The 'result' field from CDP response

        Raises:
            CDPError: If Chrome answers with an error.
            TimeoutError: If no response arrives in time.
        """
        future = self.send(method, params)

        try:
            return future.result(timeout=timeout or self.timeout)
        except TimeoutError:
            # Clean up the pending future
            with self._lock:
                for msg_id, f in list(self._pending.items()):
                    if f is future:
                        self._pending.pop(msg_id, None)
                        break
            raise TimeoutError(f"Command {method} timed out")

    def on(self, method: str, handler: EventHandler) -> None:
        """Subscribe to a CDP event. Handler receives the event params on the WebSocket thread."""
        with self._lock:
            self._handlers[method].append(handler)

    def wait_for(self, method: str, predicate: EventPredicate | None = None) -> Future:
        """Future resolved with the params of the next matching occurrence of a CDP event.

        Register before triggering the event so it cannot be missed. The predicate
        runs on the WebSocket thread; events it rejects leave the wait pending.
        Fails with ConnectionClosedError if the connection goes away first.
        """
        future = Future()
        with self._lock:
            self._waiters[method].append((future, predicate))
        return future

    def _on_open(self, ws):
        """WebSocket opened."""
        logger.debug("WebSocket connected")
        self.connected.set()

    def _on_message(self, ws, message):
        """Handle CDP message - resolve futures, dispatch events."""
        try:
            data = json.loads(message)
        except ValueError as e:
            logger.error(f"Invalid CDP message: {e}")
            return

        # Command response - resolve future
        if "id" in data:
            with self._lock:
                future = self._pending.pop(data["id"], None)

            if future and not future.done():
                if "error" in data:
                    future.set_exception(CDPError.from_response(data["error"]))
                else:
                    future.set_result(data.get("result", {}))

        # CDP event - waiters first, then subscribers
        elif "method" in data:
            method = data["method"]
            params = data.get("params", {})

            with self._lock:
                waiters = list(self._waiters.get(method, ()))
                handlers = list(self._handlers.get(method, ()))

            for waiter in waiters:
                future, predicate = waiter
                try:
                    matched = predicate is None or predicate(params)
                except Exception:
                    logger.exception(f"Wait predicate for {method} failed")
                    matched = False
                if not matched:
                    continue

                with self._lock:
                    if waiter in self._waiters.get(method, ()):
                        self._waiters[method].remove(waiter)
                if not future.done():
                    future.set_result(params)

            for handler in handlers:
                try:
                    handler(params)
                except Exception:
                    logger.exception(f"Handler for {method} failed")

    def _on_error(self, ws, error):
        """WebSocket error."""
        self._last_error = error
        logger.error(f"WebSocket error: {error}")

    def _on_close(self, ws, code, reason):
        """WebSocket closed."""
        logger.debug(f"WebSocket closed: {code} {reason}")
        self.connected.clear()
        self._fail_pending(ConnectionClosedError())

    def _fail_pending(self, error: Exception) -> None:
        """Fail outstanding commands and event waits."""
        with self._lock:
            futures = list(self._pending.values())
            self._pending.clear()
            for waiters in self._waiters.values():
                futures.extend(future for future, _ in waiters)
            self._waiters.clear()

        for future in futures:
            if not future.done():
                future.set_exception(error)


@contextmanager
def open_session(settings: Settings | None = None) -> Iterator[CDPSession]:
    """Open a CDP session for the duration of a with-block.

    The session is disconnected on every exit path, including a failed connect.

    Args:
        settings: Connection settings. Defaults to process settings.

    Yields:
        Connected CDPSession.
    """
    settings = settings or get_settings()
    session = CDPSession(
        host=settings.chrome_host,
        port=settings.chrome_port,
        timeout=settings.command_timeout,
        connect_timeout=settings.connect_timeout,
        new_target=settings.new_target,
    )
    try:
        session.connect()
        logger.info(f"Session opened on {settings.chrome_url}")
        yield session
    finally:
        session.disconnect()
        logger.info("Session closed")
