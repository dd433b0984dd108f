"""Catalog service for business logic."""

import asyncio
import io
import zipfile
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

from common.constants import FIRST_KB_NUMBER
from common.logging_config import get_logger
from catalog.exceptions import UpdateNotFoundError, UploadFailedError
from catalog.persistence import MetadataWriter, SqliteMetadataWriter
from catalog.query import query_entries
from catalog.repositories.metadata_repository import MetadataRepository
from catalog.types import CatalogPage, ListQuery, MetadataEntry
from catalog.utils import current_time_millis, make_stored_file_name

logger = get_logger(__name__)


def next_kb_number(current_max: Optional[int]) -> int:
    if current_max is None:
        return FIRST_KB_NUMBER
    return current_max + 1


class CatalogService:
    def __init__(
        self,
        upload_dir: Path,
        writer: Optional[MetadataWriter] = None,
        repository: Optional[MetadataRepository] = None,
    ):
        self.upload_dir = Path(upload_dir)
        self.repository = repository or MetadataRepository()
        self.writer = writer or SqliteMetadataWriter(self.repository)
        self._upload_lock = asyncio.Lock()

    def list_updates(self, query: ListQuery) -> CatalogPage:
        entries = self.repository.list_all()
        return query_entries(
            entries,
            filters=query.filters,
            sorts=query.sorts,
            page=query.page,
            page_size=query.page_size,
        )

    async def upload_update(
        self,
        name: str,
        original_file_name: str,
        content: bytes,
        description: Optional[str] = None,
        tag: Optional[str] = None,
    ) -> MetadataEntry:
        """
        Store an uploaded file and catalog it under the next KB number.

        Args:
            name: Display name given by the uploader
            original_file_name: File name as submitted by the client
            content: Raw file bytes
            description: Optional free text
            tag: Optional category facet

        Returns:
            The created MetadataEntry

        Raises:
            UploadFailedError: If the file or its metadata could not be stored
        """
        async with self._upload_lock:
            upload_time = current_time_millis()
            stored_name = make_stored_file_name(original_file_name, upload_time)
            while (self.upload_dir / stored_name).exists():
                upload_time += 1
                stored_name = make_stored_file_name(original_file_name, upload_time)
            stored_path = self.upload_dir / stored_name

            try:
                self.upload_dir.mkdir(parents=True, exist_ok=True)
                stored_path.write_bytes(content)

                entry = MetadataEntry(
                    kb=next_kb_number(self.repository.get_max_kb()),
                    name=name,
                    original_file_name=original_file_name,
                    description=description or "",
                    tag=tag or "",
                    upload_time=upload_time,
                    file_path=stored_name,
                )
                self.writer.write(entry)
            except Exception as e:
                logger.error(f"Upload failed: {e} [file={stored_name}]", exc_info=True)
                stored_path.unlink(missing_ok=True)
                raise UploadFailedError("Upload failed") from e

        logger.info(f"Cataloged upload [kb={entry.kb}] [file={stored_name}] [size={len(content)}]")
        return entry

    def resolve_download(self, file_path: str) -> Tuple[MetadataEntry, Path]:
        """
        Map a stored file name to its catalog entry and location on disk.

        Raises:
            UpdateNotFoundError: If the name is unknown, escapes the upload
                directory, or the file is gone
        """
        entry = self.repository.get_by_file_path(file_path)
        if entry is None:
            raise UpdateNotFoundError(f"File {file_path} not found")

        path = (self.upload_dir / entry.file_path).resolve()
        if self.upload_dir.resolve() not in path.parents or not path.is_file():
            logger.warning(f"Cataloged file missing on disk [kb={entry.kb}] [file={file_path}]")
            raise UpdateNotFoundError(f"File {file_path} not found")

        return entry, path

    def resolve_basket_files(self, kbs: Iterable[int]) -> List[Tuple[MetadataEntry, Path]]:
        resolved = []
        for entry in self.repository.get_by_kbs(sorted(set(kbs))):
            try:
                resolved.append(self.resolve_download(entry.file_path))
            except UpdateNotFoundError:
                logger.warning(f"Skipping basket member without stored file [kb={entry.kb}]")
        return resolved

    def build_basket_archive(self, kbs: Iterable[int]) -> bytes:
        """
        Bundle the stored files of a basket into a ZIP archive.

        Archive members are named KB<kb>-<original file name>.

        Raises:
            UpdateNotFoundError: If no basket member has a downloadable file
        """
        files = self.resolve_basket_files(kbs)
        if not files:
            raise UpdateNotFoundError("Basket is empty")

        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, 'w', compression=zipfile.ZIP_DEFLATED) as archive:
            for entry, path in files:
                archive.write(path, arcname=f"KB{entry.kb}-{Path(entry.original_file_name).name}")

        logger.info(f"Built basket archive with {len(files)} file(s)")
        return buffer.getvalue()
