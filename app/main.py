from __future__ import annotations
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI

from app.web import router as web_router
from datastore.reading_store import ReadingStore, build_default_store
from logging_config import configure_logging
from services.poller import SensorPoller
from settings import Settings, get_settings


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[ReadingStore] = None,
    poll: bool = True,
) -> FastAPI:
    settings = settings or get_settings()
    store = store or build_default_store()
    configure_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        poller = SensorPoller.from_settings(settings, store) if poll else None
        if poller is not None:
            poller.start()
        app.state.poller = poller
        try:
            yield
        finally:
            if poller is not None:
                poller.stop(timeout=settings.poll_interval)

    app = FastAPI(
        title="Temperature Server",
        description="Serves the latest one-wire sensor temperature as a page and an icon.",
        version="0.1.0",
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.settings = settings
    app.state.store = store
    app.state.poller = None
    app.include_router(web_router)
    return app

app = create_app()
