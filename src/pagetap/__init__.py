"""pagetap - page captures over Chrome DevTools Protocol.

HTTP endpoints that each open one CDP session against a running Chrome, load a
page, extract one artifact (screenshot, PDF, metrics, page info, network requests,
console logs, storage, accessibility summary or a script result) and close the
session.

PUBLIC API:
  - main: Entry point function for CLI
  - __version__: Package version string
"""

import argparse
import logging
import sys
import time
from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pagetap")
except PackageNotFoundError:
    __version__ = "0.0.0"


def _serve(argv: list[str]) -> None:
    """Run the HTTP server (pagetap [serve] [--host H] [--port N])."""
    from pagetap.api import run_server

    parser = argparse.ArgumentParser(prog="pagetap serve", description="Run the pagetap HTTP server")
    parser.add_argument("--host", help="Interface to bind (default from PAGETAP_HOST or 0.0.0.0)")
    parser.add_argument("--port", type=int, help="Port to listen on (default from PORT or 3000)")
    args = parser.parse_args(argv)

    run_server(host=args.host, port=args.port)


def _run_chrome(argv: list[str]) -> None:
    """Launch Chrome with debugging (pagetap run-chrome [--port N] [--headed])."""
    from pagetap.errors import PagetapError
    from pagetap.launch import run_chrome

    parser = argparse.ArgumentParser(prog="pagetap run-chrome", description="Launch Chrome with debugging enabled")
    parser.add_argument("--port", type=int, default=9222, help="Remote-debugging port (default: 9222)")
    parser.add_argument("--headed", action="store_true", help="Show a browser window (PDF needs headless)")
    parser.add_argument("--detach", action="store_true", help="Return immediately and leave Chrome running")
    args = parser.parse_args(argv)

    try:
        process = run_chrome(port=args.port, headless=not args.headed)
    except PagetapError as e:
        print(f"Error: {e}")
        sys.exit(1)

    print(f"Chrome running on port {args.port} (pid: {process.pid})")
    if args.detach:
        return

    try:
        while process.poll() is None:
            time.sleep(0.5)
    except KeyboardInterrupt:
        process.terminate()
        process.wait(timeout=5)


CLI_SUBCOMMANDS = {
    "serve": _serve,
    "run-chrome": _run_chrome,
}


def main():
    """Entry point for pagetap.

    `pagetap run-chrome` launches a debuggable Chrome; anything else runs the
    HTTP server, with `serve` optional.
    """
    logging.basicConfig(
        level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s", datefmt="%H:%M:%S"
    )

    argv = sys.argv[1:]
    if argv and argv[0] in CLI_SUBCOMMANDS:
        CLI_SUBCOMMANDS[argv[0]](argv[1:])
        return

    _serve(argv)


__all__ = ["main", "__version__"]
