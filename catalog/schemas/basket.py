"""Pydantic schemas for basket endpoints."""

from typing import Any, List, Optional

from pydantic import BaseModel, field_validator

from catalog.utils import parse_flag, parse_int, parse_kb_list


class BasketUpdateRequest(BaseModel):
    """
    Request model for toggling one KB number.

    A kb that does not coerce to an integer becomes None and the request
    is treated as a no-op. Any integer, negative included, is kept as given.
    A missing add removes the kb; strings count as true only for "true",
    "1", "yes" or "on".
    """
    kb: Optional[int] = None
    add: bool = False

    @field_validator("kb", mode="before")
    @classmethod
    def coerce_kb(cls, value: Any) -> Optional[int]:
        return parse_int(value, None)

    @field_validator("add", mode="before")
    @classmethod
    def coerce_add(cls, value: Any) -> bool:
        return parse_flag(value, False)


class BasketReconcileRequest(BaseModel):
    """Request model for merging a client-held basket."""
    kbs: List[int] = []

    @field_validator("kbs", mode="before")
    @classmethod
    def coerce_kbs(cls, value: Any) -> List[int]:
        if value is None:
            return []
        if isinstance(value, str):
            value = value.split(",")
        if not isinstance(value, (list, tuple, set)):
            return []
        return parse_kb_list(value)
