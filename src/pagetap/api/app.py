"""FastAPI application factory.

PUBLIC API:
  - create_app: Build the API with settings, haiku collection and routes
"""

import logging
from pathlib import Path

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from pagetap.api.routes import include_routes
from pagetap.api.routes.index import load_haikus
from pagetap.config import Settings, get_settings

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create the pagetap API.

    Settings and the haiku collection are read once here and held read-only on
    app.state. The static directory, when present, is mounted after the API routes
    so it never shadows them.

    Args:
        settings: Runtime settings. Defaults to process settings.

    Returns:
        Configured FastAPI app.
    """
    settings = settings or get_settings()

    app = FastAPI(title="pagetap", description="Page captures over Chrome DevTools Protocol")
    app.state.settings = settings
    app.state.haikus = load_haikus(settings.haikus_path)

    include_routes(app)

    if settings.static_dir and Path(settings.static_dir).is_dir():
        app.mount("/", StaticFiles(directory=settings.static_dir), name="static")
        logger.info(f"Serving static files from {settings.static_dir}")

    return app
