"""API routes package."""

from catalog.routes.basket_routes import router as basket_router
from catalog.routes.update_routes import router as update_router

__all__ = ["basket_router", "update_router"]
