"""Legajos - API Routes"""

from .cases import router as cases_router
from .exports import router as exports_router
from .media import router as media_router
from .persons import router as persons_router
from .sources import router as sources_router
from .users import router as users_router


__all__ = [
    "cases_router",
    "exports_router",
    "media_router",
    "persons_router",
    "sources_router",
    "users_router",
]
