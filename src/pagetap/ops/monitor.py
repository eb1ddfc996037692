"""Event recording: network requests and console messages.

Listeners are installed before navigation. After the load event the session
stays open for a fixed delay so late requests and messages are recorded too.
"""

import json
import time

from pagetap.cdp import CDPSession
from pagetap.config import Settings
from pagetap.ops._base import load_page, operation

_PRIMITIVE_TYPES = ("string", "number", "boolean")


def format_console_arg(arg: dict) -> str:
    """Render one Runtime.RemoteObject console argument as text.

    Primitives show their value, everything else shows its type in brackets.
    """
    arg_type = arg.get("type")
    if arg_type not in _PRIMITIVE_TYPES:
        return f"[{arg_type}]"

    # NaN, Infinity, -0 and friends
    if "unserializableValue" in arg:
        return arg["unserializableValue"]

    value = arg.get("value")
    if arg_type == "string":
        return str(value)
    return json.dumps(value)


@operation
def monitor_network(cdp: CDPSession, url: str, *, settings: Settings) -> dict:
    """Requests sent during load and the following network_wait seconds."""
    sent = []

    def on_request(params: dict) -> None:
        request = params.get("request", {})
        sent.append(
            {
                "url": request.get("url"),
                "method": request.get("method"),
                "type": params.get("type"),
                "timestamp": params.get("timestamp"),
            }
        )

    cdp.on("Network.requestWillBeSent", on_request)
    cdp.execute("Network.enable")
    load_page(cdp, url, settings.load_timeout)

    time.sleep(settings.network_wait)

    captured = list(sent)
    return {"requestCount": len(captured), "requests": captured}


@operation
def console_logs(cdp: CDPSession, url: str, *, settings: Settings) -> dict:
    """Console API calls during load and the following console_wait seconds."""
    logs = []

    def on_console(params: dict) -> None:
        logs.append(
            {
                "type": params.get("type"),
                "timestamp": params.get("timestamp"),
                "message": " ".join(format_console_arg(a) for a in params.get("args", [])),
            }
        )

    cdp.on("Runtime.consoleAPICalled", on_console)
    cdp.execute("Runtime.enable")
    load_page(cdp, url, settings.load_timeout)

    time.sleep(settings.console_wait)

    return {"logs": list(logs)}
