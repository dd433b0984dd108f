"""Pydantic schemas for API requests and responses."""

from catalog.schemas.basket import BasketReconcileRequest, BasketUpdateRequest
from catalog.schemas.common import ErrorResponse
from catalog.schemas.updates import ListUpdatesResponse, UpdateEntryResponse, UploadResponse

__all__ = [
    "BasketReconcileRequest",
    "BasketUpdateRequest",
    "ErrorResponse",
    "ListUpdatesResponse",
    "UpdateEntryResponse",
    "UploadResponse",
]
