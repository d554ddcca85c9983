# app/routers/__init__.py
"""
API routers.
"""

from app.routers.admin import router as admin_router
from app.routers.articles import router as articles_router
from app.routers.preferences import router as preferences_router

__all__ = [
    "admin_router",
    "articles_router",
    "preferences_router",
]
