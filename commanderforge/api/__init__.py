from commanderforge.api.auto_build import router as auto_build_router
from commanderforge.api.collection import router as collection_router
from commanderforge.api.decks import router as decks_router
from commanderforge.api.health import router as health_router

__all__ = [
    "auto_build_router",
    "collection_router",
    "decks_router",
    "health_router",
]
