from .topics import router as topics_router
from .tags import router as tags_router
from .categories import router as categories_router
from .admin import router as admin_router

__all__ = [
    "topics_router",
    "tags_router",
    "categories_router",
    "admin_router",
]
