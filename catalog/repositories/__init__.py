"""Repository layer for data access."""

from catalog.repositories.metadata_repository import MetadataRepository
from catalog.repositories.basket_repository import BasketRepository

__all__ = [
    "MetadataRepository",
    "BasketRepository",
]
