"""HTTP server lifecycle.

PUBLIC API:
  - run_server: Run the API under uvicorn in the foreground (blocking)
"""

import logging

import uvicorn

from pagetap.api.app import create_app
from pagetap.config import Settings, get_settings

logger = logging.getLogger(__name__)


def run_server(settings: Settings | None = None, host: str | None = None, port: int | None = None):
    """Run the API server in the foreground.

    Args:
        settings: Runtime settings. Defaults to process settings.
        host: Override settings.host.
        port: Override settings.port.
    """
    settings = settings or get_settings()
    host = host or settings.host
    port = port or settings.port

    api = create_app(settings)
    logger.info(f"pagetap listening on {host}:{port}, Chrome at {settings.chrome_url}")

    config = uvicorn.Config(api, host=host, port=port, log_level="info")
    server = uvicorn.Server(config)

    try:
        server.run()
    except (SystemExit, KeyboardInterrupt):
        pass
    finally:
        logger.info("Server stopped")
