"""Tests for the catalog service."""

import io
import zipfile
from unittest.mock import MagicMock

import pytest

from catalog.exceptions import PersistenceError, UpdateNotFoundError, UploadFailedError
from catalog.repositories.metadata_repository import MetadataRepository
from catalog.services.catalog_service import CatalogService, next_kb_number
from catalog.types import ListQuery, SortKey
from tests.conftest import make_entry


@pytest.fixture
def service(test_db, tmp_path):
    return CatalogService(upload_dir=tmp_path / "uploads")


def test_next_kb_number():
    assert next_kb_number(None) == 100001
    assert next_kb_number(100041) == 100042


class TestUpload:
    @pytest.mark.asyncio
    async def test_first_upload_gets_starting_kb(self, service):
        entry = await service.upload_update(
            name="Cumulative Update",
            original_file_name="kb5031356.msu",
            content=b"payload",
            description="October rollup",
            tag="security",
        )

        assert entry.kb == 100001
        assert entry.file_path.endswith("-kb5031356.msu")
        assert (service.upload_dir / entry.file_path).read_bytes() == b"payload"
        assert MetadataRepository.get_by_kbs([100001]) == [entry]

    @pytest.mark.asyncio
    async def test_optional_fields_default_to_empty(self, service):
        entry = await service.upload_update(name="n", original_file_name="a.cab", content=b"")

        assert entry.description == ""
        assert entry.tag == ""
        assert entry.upload_time > 0

    @pytest.mark.asyncio
    async def test_next_upload_uses_max_plus_one(self, service):
        MetadataRepository.create_entry(make_entry(100050, upload_time=1))
        MetadataRepository.create_entry(make_entry(100010, upload_time=2))

        entry = await service.upload_update(name="n", original_file_name="a.cab", content=b"x")

        assert entry.kb == 100051

    @pytest.mark.asyncio
    async def test_sequential_uploads_are_unique(self, service):
        first = await service.upload_update(name="a", original_file_name="a.cab", content=b"1")
        second = await service.upload_update(name="b", original_file_name="b.cab", content=b"2")

        assert second.kb == first.kb + 1

    @pytest.mark.asyncio
    async def test_primary_failure_removes_stored_file(self, test_db, tmp_path):
        writer = MagicMock()
        writer.write.side_effect = PersistenceError("db down")
        service = CatalogService(upload_dir=tmp_path / "uploads", writer=writer)

        with pytest.raises(UploadFailedError):
            await service.upload_update(name="n", original_file_name="a.cab", content=b"x")

        assert list((tmp_path / "uploads").iterdir()) == []


class TestListing:
    def test_list_updates_queries_repository(self, service):
        for kb, tag in ((100001, "x"), (100002, "y"), (100003, "x")):
            MetadataRepository.create_entry(make_entry(kb, tag=tag, upload_time=kb))

        page = service.list_updates(ListQuery(
            filters={"tag": "X"},
            sorts=[SortKey("kb", "desc")],
            page=1,
            page_size=1,
        ))

        assert [entry.kb for entry in page.data] == [100003]
        assert page.total_pages == 2

    def test_list_updates_empty_catalog(self, service):
        page = service.list_updates(ListQuery())
        assert page.data == []
        assert page.total_pages == 0


class TestDownloads:
    @pytest.mark.asyncio
    async def test_resolve_download(self, service):
        entry = await service.upload_update(name="n", original_file_name="a.cab", content=b"abc")

        resolved, path = service.resolve_download(entry.file_path)

        assert resolved == entry
        assert path.read_bytes() == b"abc"

    def test_resolve_unknown_file(self, service):
        with pytest.raises(UpdateNotFoundError):
            service.resolve_download("123-missing.cab")

    def test_resolve_file_missing_on_disk(self, service):
        entry = make_entry(100001, upload_time=5)
        MetadataRepository.create_entry(entry)

        with pytest.raises(UpdateNotFoundError):
            service.resolve_download(entry.file_path)

    def test_resolve_rejects_escaping_paths(self, service, tmp_path):
        (tmp_path / "secret.txt").write_text("nope")
        MetadataRepository.create_entry(make_entry(100001, file_path="../secret.txt"))

        with pytest.raises(UpdateNotFoundError):
            service.resolve_download("../secret.txt")

    @pytest.mark.asyncio
    async def test_basket_archive(self, service):
        first = await service.upload_update(name="a", original_file_name="a.cab", content=b"AAA")
        second = await service.upload_update(name="b", original_file_name="b.msu", content=b"BBB")

        archive = zipfile.ZipFile(io.BytesIO(service.build_basket_archive({first.kb, second.kb, 999})))

        assert sorted(archive.namelist()) == [f"KB{first.kb}-a.cab", f"KB{second.kb}-b.msu"]
        assert archive.read(f"KB{second.kb}-b.msu") == b"BBB"

    def test_empty_basket_archive(self, service):
        with pytest.raises(UpdateNotFoundError):
            service.build_basket_archive(set())
