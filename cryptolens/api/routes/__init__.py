"""
Route package
"""

from cryptolens.api.routes.query import router as query_router
from cryptolens.api.routes.health import router as health_router

__all__ = [
    "query_router",
    "health_router",
]
