"""Index page and health check."""

import html
import json
import logging
import os
from importlib import resources
from pathlib import Path
from typing import Any

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse

logger = logging.getLogger(__name__)

router = APIRouter()

INDEX_HTML = """<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <title>pagetap</title>
    <style>
        body {{ font-family: Georgia, serif; background: #fafaf7; color: #222; margin: 2rem auto; max-width: 48rem; }}
        h1 {{ font-weight: normal; }}
        .haiku {{ border-left: 3px solid #c9c2b0; margin: 1.5rem 0; padding-left: 1rem; }}
        .haiku img {{ max-width: 100%; margin-top: 0.5rem; }}
    </style>
</head>
<body>
    <h1>Haikus</h1>
{items}
</body>
</html>
"""

HAIKU_HTML = """    <div class="haiku">
        <p>{lines}</p>{image}
    </div>"""


def load_haikus(path: str | None = None) -> list[dict[str, Any]]:
    """Read the haiku collection from a JSON file, or the packaged one when path is None."""
    if path:
        text = Path(path).read_text(encoding="utf-8")
    else:
        text = resources.files("pagetap").joinpath("data/haikus.json").read_text(encoding="utf-8")

    haikus = json.loads(text)
    if not isinstance(haikus, list):
        raise ValueError(f"Haiku collection must be a JSON list, got {type(haikus).__name__}")
    logger.debug(f"Loaded {len(haikus)} haikus")
    return haikus


def render_index(haikus: list[dict[str, Any]]) -> str:
    """HTML listing of the collection. Text and image URLs are escaped."""
    items = []
    for haiku in haikus:
        lines = "<br>".join(html.escape(line) for line in str(haiku.get("text", "")).splitlines())
        image = ""
        if haiku.get("image"):
            image = f'\n        <img src="{html.escape(haiku["image"], quote=True)}" alt="">'
        items.append(HAIKU_HTML.format(lines=lines, image=image))
    return INDEX_HTML.format(items="\n".join(items))


@router.get("/", response_class=HTMLResponse)
async def index(request: Request) -> HTMLResponse:
    return HTMLResponse(render_index(request.app.state.haikus))


@router.get("/health")
async def health_check() -> dict[str, Any]:
    """Quick health check. Does not contact Chrome."""
    return {"status": "ok", "pid": os.getpid()}
