from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, Response
from fastapi.templating import Jinja2Templates

from datastore.reading_store import ReadingStore
from settings import Settings


templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent / "templates"))

UNKNOWN_TEMPERATURE = "--.-"
DATE_FORMAT = "%a %b %d %I:%M:%S %p %Z %Y"
NO_CACHE_HEADERS = {"Cache-Control": "no-store, no-cache, must-revalidate"}


def get_store(request: Request) -> ReadingStore:
    return request.app.state.store


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def format_timestamp(moment: Optional[datetime] = None) -> str:
    """Render ``moment`` (default: now, local time) like ``Mon Jan 02 03:04:05 PM UTC 2024``."""
    if moment is None:
        moment = datetime.now().astimezone()
    return moment.strftime(DATE_FORMAT)


def format_temperature(value: Optional[float]) -> str:
    if value is None:
        return UNKNOWN_TEMPERATURE
    return f"{value:.3f}°C"


def format_icon_text(value: Optional[float]) -> str:
    if value is None:
        return UNKNOWN_TEMPERATURE
    return f"{value:.1f}"


router = APIRouter(include_in_schema=False)


@router.get("/", name="index", response_class=HTMLResponse)
async def index(
    request: Request,
    store: ReadingStore = Depends(get_store),
    settings: Settings = Depends(get_app_settings),
) -> HTMLResponse:
    temperature = store.read()
    return templates.TemplateResponse(
        request,
        "index.html",
        {
            "site_name": settings.site_name,
            "current_date": format_timestamp(),
            "temperature": format_temperature(temperature),
        },
        media_type="text/html",
    )


@router.get("/favicon.svg", name="favicon")
async def favicon(
    request: Request,
    store: ReadingStore = Depends(get_store),
) -> Response:
    return templates.TemplateResponse(
        request,
        "favicon.svg",
        {"text": format_icon_text(store.read())},
        headers=NO_CACHE_HEADERS,
        media_type="image/svg+xml",
    )
