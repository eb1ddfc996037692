"""Request bodies for API endpoints."""

from typing import Optional

from pydantic import BaseModel, StrictStr


class ExecuteRequest(BaseModel):
    """Body for POST /execute. Presence of both fields is checked by the route."""

    url: Optional[StrictStr] = None
    code: Optional[StrictStr] = None
