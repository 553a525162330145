from __future__ import annotations

from pathlib import Path

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from services.classifier import AUTUMN_THRESHOLD, WINTER_THRESHOLD
from settings import get_settings


templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent / "templates"))

BROWSER_CACHE_KEY = "temperatureData"


router = APIRouter(include_in_schema=False)


@router.get("/ui", name="ui_index", response_class=HTMLResponse)
async def ui_index(request: Request) -> HTMLResponse:
    settings = get_settings()
    return templates.TemplateResponse(
        request,
        "ui/index.html",
        {
            "data_url": request.url_for("get_temperature").path,
            "cache_key": BROWSER_CACHE_KEY,
            "cache_ttl_ms": settings.cache_ttl_minutes * 60 * 1000,
            "window_size": settings.window_size,
            "autumn_threshold": AUTUMN_THRESHOLD,
            "winter_threshold": WINTER_THRESHOLD,
        },
    )
