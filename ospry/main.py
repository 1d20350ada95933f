from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from ospry.config import get_settings
from ospry.handlers import images_handler
from ospry.handlers.dependencies import get_ospry_client


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    if get_ospry_client.cache_info().currsize:
        await get_ospry_client().close()
        get_ospry_client.cache_clear()


def create_app() -> FastAPI:
    settings = get_settings()
    logging.basicConfig(level=settings.log_level.upper())

    app = FastAPI(title="ospry demo", lifespan=lifespan)
    app.include_router(images_handler.router)

    @app.get("/healthz")
    async def healthz():
        return {"status": "ok"}

    return app


app = create_app()
