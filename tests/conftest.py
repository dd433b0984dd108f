"""Shared pytest fixtures for all tests."""

from pathlib import Path
from typing import Generator

import pytest

from catalog.database import init_database
from catalog.types import MetadataEntry


def make_entry(kb: int, name: str = "", tag: str = "", upload_time: int = 0, **overrides) -> MetadataEntry:
    """
    Build a MetadataEntry with sensible defaults for tests.
    """
    fields = {
        "kb": kb,
        "name": name or f"Update {kb}",
        "original_file_name": f"update-{kb}.msu",
        "description": "",
        "tag": tag,
        "upload_time": upload_time,
        "file_path": f"{upload_time}-update-{kb}.msu",
    }
    fields.update(overrides)
    return MetadataEntry(**fields)


@pytest.fixture
def test_db(tmp_path, monkeypatch) -> Generator[Path, None, None]:
    """
    Create a temporary test database for each test.
    """
    db_path = tmp_path / "test.db"
    monkeypatch.setattr("catalog.database.DATABASE_PATH", str(db_path))
    monkeypatch.setattr("catalog.config.DATABASE_PATH", str(db_path))
    init_database()
    yield db_path


@pytest.fixture
def sample_entries():
    """
    A small catalog with mixed tags, names and upload times.
    """
    return [
        make_entry(100001, name="Cumulative Update", tag="security-update", upload_time=1000,
                   description="Monthly rollup"),
        make_entry(100002, name="servicing stack", tag="servicing", upload_time=2000),
        make_entry(100003, name="Defender definitions", tag="Security-Update", upload_time=3000),
        make_entry(100004, name="audio driver", tag="driver", upload_time=4000,
                   description="Realtek SECURE fix"),
        make_entry(100005, name="Bluetooth driver", tag="driver", upload_time=5000),
    ]
