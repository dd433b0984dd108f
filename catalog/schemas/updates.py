"""Pydantic schemas for catalog listing and upload endpoints."""

from typing import List

from pydantic import BaseModel, ConfigDict, Field

from catalog.types import MetadataEntry


class UpdateEntryResponse(BaseModel):
    """Response model for one catalog entry, serialized with camelCase keys."""
    model_config = ConfigDict(populate_by_name=True)

    kb: int
    name: str
    original_file_name: str = Field(alias="originalFileName")
    description: str
    tag: str
    upload_time: int = Field(alias="uploadTime")
    file_path: str = Field(alias="filePath")

    @classmethod
    def from_entry(cls, entry: MetadataEntry) -> "UpdateEntryResponse":
        return cls(**entry.to_document())


class ListUpdatesResponse(BaseModel):
    """Response model for the paginated list."""
    model_config = ConfigDict(populate_by_name=True)

    data: List[UpdateEntryResponse]
    total_pages: int = Field(alias="totalPages")


class UploadResponse(BaseModel):
    """Response model for a successful upload."""
    message: str
    kb: int
