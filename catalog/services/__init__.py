"""Service layer for business logic."""

from catalog.services.basket_service import BasketStore
from catalog.services.catalog_service import CatalogService

__all__ = [
    "BasketStore",
    "CatalogService",
]
