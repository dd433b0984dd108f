"""Catalog listing, upload and download API routes."""

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile, status
from fastapi.responses import FileResponse

from common.logging_config import get_logger
from catalog.auth import require_uploader
from catalog.schemas.common import ErrorResponse
from catalog.schemas.updates import ListUpdatesResponse, UpdateEntryResponse, UploadResponse
from catalog.services.catalog_service import CatalogService
from catalog.session import get_catalog_service
from catalog.utils import parse_list_query

logger = get_logger(__name__)

router = APIRouter(tags=["Updates"])


@router.get("/api/list-update", response_model=ListUpdatesResponse)
async def list_updates(
    request: Request,
    catalog_service: CatalogService = Depends(get_catalog_service),
):
    """
    List catalog entries with filtering, multi-key sorting and pagination.

    Query parameters:
        - page: 1-indexed page number (default 1)
        - limit: page size (default 10)
        - filter_<column>: case-insensitive substring filter per column
        - sort0..sort9: sort columns in priority order
        - dir0..dir9: "asc" (default) or "desc" for the matching sort column

    Returns:
        - data: entries of the requested page
        - totalPages: number of pages for the filtered result (0 when empty)
    """
    query = parse_list_query(request.query_params)
    page = catalog_service.list_updates(query)

    return ListUpdatesResponse(
        data=[UpdateEntryResponse.from_entry(entry) for entry in page.data],
        total_pages=page.total_pages,
    )


@router.post(
    "/upload",
    response_model=UploadResponse,
    responses={
        status.HTTP_401_UNAUTHORIZED: {"model": ErrorResponse},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ErrorResponse},
    },
)
async def upload_update(
    file: UploadFile = File(...),
    name: str = Form(...),
    description: str = Form(""),
    tag: str = Form(""),
    uploader: str = Depends(require_uploader),
    catalog_service: CatalogService = Depends(get_catalog_service),
):
    """
    Upload a new update file (HTTP Basic auth required).

    Parameters:
        - file: file to upload (multipart/form-data)
        - name: display name
        - description: optional free text
        - tag: optional category

    Returns:
        - message: "Upload successful"
        - kb: KB number assigned to the new entry

    Raises:
        - 401: Missing or invalid credentials
        - 500: The file or its metadata could not be stored
    """
    content = await file.read()

    entry = await catalog_service.upload_update(
        name=name,
        original_file_name=file.filename or "upload",
        content=content,
        description=description,
        tag=tag,
    )

    logger.info(f"Upload accepted [kb={entry.kb}] [uploader={uploader}]")
    return UploadResponse(message="Upload successful", kb=entry.kb)


@router.get(
    "/uploads/{file_path}",
    responses={status.HTTP_404_NOT_FOUND: {"model": ErrorResponse}},
)
async def download_update(
    file_path: str,
    catalog_service: CatalogService = Depends(get_catalog_service),
):
    """
    Download a single stored update file by its stored name.

    Raises:
        - 404: Unknown file
    """
    entry, path = catalog_service.resolve_download(file_path)

    return FileResponse(
        path,
        media_type="application/octet-stream",
        filename=entry.original_file_name,
    )
