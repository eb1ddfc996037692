"""
Pytest configuration and shared fixtures for pagetap tests.
"""

from collections import defaultdict
from concurrent.futures import Future
from contextlib import contextmanager

import pytest

from pagetap.config import Settings


class FakeCDP:
    """Stand-in for a connected CDPSession.

    Responses are looked up by method; a callable response receives the params, an
    exception response is raised. Events listed in ``events`` are delivered to
    subscribers when Page.navigate is executed, followed by the lifecycle load for
    the navigation's loaderId when ``load_fires`` is set.
    """

    def __init__(self, responses=None, events=None, load_fires=True):
        self.responses = {"Page.navigate": {"frameId": "F1", "loaderId": "L1"}}
        self.responses.update(responses or {})
        self.events = events or {}
        self.load_fires = load_fires
        self.calls = []
        self.handlers = defaultdict(list)
        self.waiters = defaultdict(list)

    def execute(self, method, params=None, timeout=None):
        self.calls.append((method, params))
        if method == "Page.navigate":
            for event, items in self.events.items():
                for event_params in items:
                    self.fire(event, event_params)

        response = self.responses.get(method, {})
        if isinstance(response, Exception):
            raise response
        if callable(response):
            response = response(params)

        if method == "Page.navigate" and self.load_fires and not response.get("errorText"):
            self.fire("Page.lifecycleEvent", {"name": "load", "loaderId": response.get("loaderId")})
        return response

    def send(self, method, params=None):
        future = Future()
        try:
            future.set_result(self.execute(method, params))
        except Exception as e:
            future.set_exception(e)
        return future

    def on(self, method, handler):
        self.handlers[method].append(handler)

    def wait_for(self, method, predicate=None):
        future = Future()
        self.waiters[method].append((future, predicate))
        return future

    def fire(self, method, params):
        """Deliver an event the way the session's WebSocket thread does."""
        for waiter in list(self.waiters[method]):
            future, predicate = waiter
            if predicate is None or predicate(params):
                self.waiters[method].remove(waiter)
                future.set_result(params)
        for handler in self.handlers[method]:
            handler(params)

    @property
    def methods(self):
        return [method for method, _ in self.calls]

    def params_for(self, method):
        return [params for m, params in self.calls if m == method]


@pytest.fixture
def settings():
    """Settings with no post-load waits and no static directory."""
    return Settings(network_wait=0, console_wait=0, static_dir=None)


@pytest.fixture
def session_spy(monkeypatch):
    """Route operations to a FakeCDP and count session opens and closes.

    Set ``spy.cdp`` to customise the fake, or ``spy.connect_error`` to make the
    session fail to open.
    """

    class Spy:
        cdp = FakeCDP()
        connect_error = None
        opened = 0
        closed = 0

    spy = Spy()

    @contextmanager
    def fake_open_session(settings=None):
        spy.opened += 1
        try:
            if spy.connect_error:
                raise spy.connect_error
            yield spy.cdp
        finally:
            spy.closed += 1

    monkeypatch.setattr("pagetap.ops._base.open_session", fake_open_session)
    return spy


@pytest.fixture
def test_app(settings):
    """Create a test FastAPI application instance."""
    from pagetap.api import create_app

    return create_app(settings)


@pytest.fixture
async def async_client(test_app):
    """Create an async HTTP client for testing FastAPI endpoints."""
    from httpx import ASGITransport, AsyncClient

    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
