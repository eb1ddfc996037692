"""Route registration.

PUBLIC API:
  - include_routes: Register all API route modules with FastAPI app

Route Modules:
  - index.py: Haiku index page and health check
  - capture.py: Screenshot, full-page screenshot and PDF
  - data.py: Metrics, page info, storage, accessibility, script execution
  - monitor.py: Network request and console log recording
"""

from fastapi import FastAPI


def include_routes(app: FastAPI):
    """Include all route modules.

    Args:
        app: FastAPI application instance
    """
    from pagetap.api.routes import capture, data, index, monitor

    app.include_router(index.router)
    app.include_router(capture.router)
    app.include_router(data.router)
    app.include_router(monitor.router)
