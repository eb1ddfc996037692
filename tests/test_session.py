"""
Tests for the CDP session.

Messages are fed straight into the WebSocket callbacks; no browser is involved.
"""

import json
from unittest.mock import MagicMock, patch

import pytest
import requests

from pagetap.cdp import CDPSession, open_session
from pagetap.config import Settings
from pagetap.errors import CDPError, ConnectionClosedError, PagetapError


def _connected_session() -> CDPSession:
    session = CDPSession(new_target=False)
    session.ws_app = MagicMock()
    session.connected.set()
    return session


def _response(payload, status_code=200):
    response = MagicMock()
    response.json.return_value = payload
    response.status_code = status_code
    response.raise_for_status.return_value = None
    return response


class FakeWebSocketApp:
    """WebSocketApp double that opens immediately when run."""

    instances = []

    def __init__(self, url, on_open=None, on_message=None, on_error=None, on_close=None):
        self.url = url
        self.on_open = on_open
        self.on_close = on_close
        self.sent = []
        self.closed = False
        FakeWebSocketApp.instances.append(self)

    def run_forever(self, **kwargs):
        self.run_kwargs = kwargs
        self.on_open(self)

    def send(self, data):
        self.sent.append(json.loads(data))

    def close(self):
        self.closed = True


class TestCommands:
    """Tests for command send and response handling."""

    def test_send_requires_connection(self):
        with pytest.raises(RuntimeError, match="Not connected"):
            CDPSession().send("Page.enable")

    def test_send_serializes_message(self):
        session = _connected_session()
        session.send("Page.navigate", {"url": "http://a"})
        session.send("Page.enable")

        sent = [json.loads(call.args[0]) for call in session.ws_app.send.call_args_list]
        assert sent == [
            {"id": 1, "method": "Page.navigate", "params": {"url": "http://a"}},
            {"id": 2, "method": "Page.enable"},
        ]

    def test_response_resolves_future(self):
        session = _connected_session()
        future = session.send("Page.navigate", {"url": "http://a"})
        session._on_message(None, json.dumps({"id": 1, "result": {"frameId": "F"}}))
        assert future.result(timeout=1) == {"frameId": "F"}

    def test_error_response_raises_cdp_error(self):
        session = _connected_session()
        future = session.send("Page.bogus")
        session._on_message(None, json.dumps({"id": 1, "error": {"code": -32601, "message": "'Page.bogus' wasn't found"}}))

        with pytest.raises(CDPError) as exc_info:
            future.result(timeout=1)
        assert exc_info.value.code == -32601
        assert str(exc_info.value) == "'Page.bogus' wasn't found"

    def test_execute_timeout_drops_pending(self):
        session = _connected_session()
        with pytest.raises(TimeoutError, match="Page.enable timed out"):
            session.execute("Page.enable", timeout=0.01)
        assert session._pending == {}

    def test_invalid_message_is_ignored(self):
        session = _connected_session()
        session._on_message(None, "not json")


class TestEvents:
    """Tests for event subscription and one-shot waits."""

    def test_handlers_receive_params(self):
        session = _connected_session()
        seen = []
        session.on("Network.requestWillBeSent", seen.append)

        session._on_message(None, json.dumps({"method": "Network.requestWillBeSent", "params": {"requestId": "1"}}))
        session._on_message(None, json.dumps({"method": "Network.requestWillBeSent", "params": {"requestId": "2"}}))

        assert seen == [{"requestId": "1"}, {"requestId": "2"}]

    def test_failing_handler_does_not_stop_others(self):
        session = _connected_session()
        seen = []

        def broken(params):
            raise ValueError("bad handler")

        session.on("Runtime.consoleAPICalled", broken)
        session.on("Runtime.consoleAPICalled", seen.append)
        session._on_message(None, json.dumps({"method": "Runtime.consoleAPICalled", "params": {"type": "log"}}))

        assert seen == [{"type": "log"}]

    def test_wait_for_is_one_shot(self):
        session = _connected_session()
        first = session.wait_for("Page.loadEventFired")
        session._on_message(None, json.dumps({"method": "Page.loadEventFired", "params": {"timestamp": 5.0}}))
        second = session.wait_for("Page.loadEventFired")

        assert first.result(timeout=1) == {"timestamp": 5.0}
        assert not second.done()

    def test_wait_for_predicate_skips_non_matching_events(self):
        session = _connected_session()
        seen = []
        session.on("Page.lifecycleEvent", seen.append)
        load = session.wait_for("Page.lifecycleEvent", lambda params: params.get("loaderId") == "L2")

        session._on_message(None, json.dumps({"method": "Page.lifecycleEvent", "params": {"loaderId": "L1"}}))
        assert not load.done()

        session._on_message(None, json.dumps({"method": "Page.lifecycleEvent", "params": {"loaderId": "L2"}}))
        assert load.result(timeout=1) == {"loaderId": "L2"}
        assert session._waiters["Page.lifecycleEvent"] == []
        assert len(seen) == 2

    def test_failing_predicate_leaves_wait_pending(self):
        session = _connected_session()

        def broken(params):
            raise KeyError("name")

        load = session.wait_for("Page.lifecycleEvent", broken)
        session._on_message(None, json.dumps({"method": "Page.lifecycleEvent", "params": {}}))
        assert not load.done()

    def test_close_fails_pending_and_waiters(self):
        session = _connected_session()
        command = session.send("Page.navigate", {"url": "http://a"})
        load = session.wait_for("Page.loadEventFired")

        session._on_close(None, 1006, "gone")

        with pytest.raises(ConnectionClosedError):
            command.result(timeout=1)
        with pytest.raises(ConnectionClosedError):
            load.result(timeout=1)
        assert not session.connected.is_set()


class TestTargets:
    """Tests for target discovery and lifecycle over the HTTP endpoint."""

    def test_list_pages_filters_pages_with_websocket(self):
        pages = [
            {"id": "1", "type": "page", "webSocketDebuggerUrl": "ws://x/1"},
            {"id": "2", "type": "service_worker", "webSocketDebuggerUrl": "ws://x/2"},
            {"id": "3", "type": "page"},
        ]
        with patch("pagetap.cdp.session.requests.get", return_value=_response(pages)) as get:
            assert [p["id"] for p in CDPSession(port=9333).list_pages()] == ["1"]
        get.assert_called_once_with("http://localhost:9333/json", timeout=2)

    def test_list_pages_unreachable(self):
        with patch("pagetap.cdp.session.requests.get", side_effect=requests.ConnectionError("refused")):
            with pytest.raises(PagetapError, match="Failed to list pages: refused"):
                CDPSession().list_pages()

    def test_connect_without_pages(self):
        with patch("pagetap.cdp.session.requests.get", return_value=_response([])):
            with pytest.raises(RuntimeError, match="No pages available"):
                CDPSession(new_target=False).connect()

    def test_connect_creates_and_disconnect_closes_target(self):
        target = {"id": "T1", "type": "page", "webSocketDebuggerUrl": "ws://localhost:9222/devtools/page/T1"}
        FakeWebSocketApp.instances.clear()

        with (
            patch("pagetap.cdp.session.websocket.WebSocketApp", FakeWebSocketApp),
            patch("pagetap.cdp.session.requests.put", return_value=_response(target)) as put,
            patch("pagetap.cdp.session.requests.get", return_value=_response({})) as get,
        ):
            session = CDPSession()
            session.connect()

            assert session.is_connected
            put.assert_called_once_with("http://localhost:9222/json/new?about:blank", timeout=2)
            (ws,) = FakeWebSocketApp.instances
            assert ws.url == target["webSocketDebuggerUrl"]
            assert "reconnect" not in ws.run_kwargs

            session.disconnect()
            session.disconnect()

        assert ws.closed
        assert not session.is_connected
        get.assert_called_once_with("http://localhost:9222/json/close/T1", timeout=2)

    def test_connect_twice_is_rejected(self):
        session = _connected_session()
        with pytest.raises(RuntimeError, match="Already connected"):
            session.connect()


class TestOpenSession:
    """Tests for the scoped session context manager."""

    def test_connects_and_always_disconnects(self):
        settings = Settings(chrome_host="chrome", chrome_port=9229, command_timeout=7, new_target=False)
        with patch("pagetap.cdp.session.CDPSession") as session_cls:
            with open_session(settings) as session:
                session.connect.assert_called_once_with()
            session.disconnect.assert_called_once_with()

        session_cls.assert_called_once_with(
            host="chrome", port=9229, timeout=7, connect_timeout=5.0, new_target=False
        )

    def test_disconnects_when_body_raises(self):
        with patch("pagetap.cdp.session.CDPSession") as session_cls:
            with pytest.raises(ValueError):
                with open_session(Settings()):
                    raise ValueError("collect failed")
        session_cls.return_value.disconnect.assert_called_once_with()

    def test_disconnects_when_connect_fails(self):
        with patch("pagetap.cdp.session.CDPSession") as session_cls:
            session_cls.return_value.connect.side_effect = TimeoutError("Failed to connect to Chrome")
            with pytest.raises(TimeoutError):
                with open_session(Settings()):
                    pass
        session_cls.return_value.disconnect.assert_called_once_with()
