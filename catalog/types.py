"""Catalog data type definitions."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from common.constants import SORT_ASCENDING, SORT_DESCENDING


# wire column name -> MetadataEntry attribute
COLUMN_ATTRIBUTES: Dict[str, str] = {
    "kb": "kb",
    "name": "name",
    "originalFileName": "original_file_name",
    "description": "description",
    "tag": "tag",
    "uploadTime": "upload_time",
    "filePath": "file_path",
}


@dataclass(frozen=True)
class MetadataEntry:
    """
    One cataloged update file. Immutable once created.
    """
    kb: int
    name: str
    original_file_name: str
    description: str
    tag: str
    upload_time: int
    file_path: str

    def column_value(self, column: str) -> Optional[Any]:
        """Return the value behind a wire column name, or None for unknown columns."""
        attribute = COLUMN_ATTRIBUTES.get(column)
        if attribute is None:
            return None
        return getattr(self, attribute)

    def to_document(self) -> Dict[str, Any]:
        return {
            column: getattr(self, attribute)
            for column, attribute in COLUMN_ATTRIBUTES.items()
        }

    @classmethod
    def from_document(cls, document: Dict[str, Any]) -> "MetadataEntry":
        return cls(
            kb=int(document["kb"]),
            name=document.get("name") or "",
            original_file_name=document.get("originalFileName") or "",
            description=document.get("description") or "",
            tag=document.get("tag") or "",
            upload_time=int(document.get("uploadTime") or 0),
            file_path=document.get("filePath") or "",
        )


@dataclass(frozen=True)
class SortKey:
    column: str
    direction: str = SORT_ASCENDING

    @property
    def descending(self) -> bool:
        return self.direction == SORT_DESCENDING


@dataclass(frozen=True)
class ListQuery:
    """
    Parsed list request: filters, sort keys and the requested page.
    """
    filters: Dict[str, str] = field(default_factory=dict)
    sorts: List[SortKey] = field(default_factory=list)
    page: int = 1
    page_size: int = 10


@dataclass(frozen=True)
class CatalogPage:
    data: List[MetadataEntry]
    total_pages: int
