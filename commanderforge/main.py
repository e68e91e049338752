"""
CommanderForge HTTP service.

Routes:
    /auto-build           build a deck for one commander or two partners
    /collection/{user}    upload, read and delete a stored collection
    /decks/{user}         save and manage built decks
    /health, /ready       service status

Run with: uvicorn commanderforge.main:app
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from importlib.metadata import version as pkg_version

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from commanderforge.api import (
    auto_build_router,
    collection_router,
    decks_router,
    health_router,
)
from commanderforge.config import settings
from commanderforge.db.database import init_db


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    # Tables must exist before the first collection upload.
    await init_db()
    yield


def create_app() -> FastAPI:
    application = FastAPI(
        title=settings.app_name,
        description="Commander deck builder backed by your collection and Scryfall.",
        version=pkg_version("commanderforge"),
        lifespan=lifespan,
    )
    for router in (auto_build_router, collection_router, decks_router, health_router):
        application.include_router(router)

    # No cookie auth, so any browser origin may call.
    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    return application


app = create_app()
