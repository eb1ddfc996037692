"""HTTP API for pagetap.

PUBLIC API:
  - create_app: FastAPI application factory
  - run_server: Run the API under uvicorn
"""

from pagetap.api.app import create_app
from pagetap.api.server import run_server

__all__ = ["create_app", "run_server"]
