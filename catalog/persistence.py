"""
Metadata write port.

Uploads are written once through a MetadataWriter. The default wiring is a
FanOutMetadataWriter around the SQLite repository (primary) and a JSON file
backup (secondary). Primary failures propagate to the caller; secondary
failures are logged and never block or fail the primary write.
"""

import json
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Sequence

from common.logging_config import get_logger
from catalog.exceptions import PersistenceError
from catalog.repositories.metadata_repository import MetadataRepository
from catalog.types import MetadataEntry

logger = get_logger(__name__)


class MetadataWriter(ABC):
    """Destination for newly created metadata entries."""

    @abstractmethod
    def write(self, entry: MetadataEntry) -> None:
        pass


class SqliteMetadataWriter(MetadataWriter):
    def __init__(self, repository: MetadataRepository = None):
        self.repository = repository or MetadataRepository()

    def write(self, entry: MetadataEntry) -> None:
        self.repository.create_entry(entry)


class JsonBackupWriter(MetadataWriter):
    """
    Appends entries to a JSON array file.

    The whole file is rewritten on every append through a temporary file
    and an atomic rename, so a crash never leaves a truncated backup.
    """

    def __init__(self, json_path: str):
        self._json_path = Path(json_path)
        self._file_lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._json_path

    def read_all(self) -> List[Dict[str, Any]]:
        if not self._json_path.exists():
            return []
        with open(self._json_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        if not isinstance(data, list):
            raise PersistenceError(f"Backup file {self._json_path} does not hold a JSON array")
        return data

    def write(self, entry: MetadataEntry) -> None:
        with self._file_lock:
            try:
                data = self.read_all()
                data.append(entry.to_document())

                self._json_path.parent.mkdir(parents=True, exist_ok=True)
                temp_path = self._json_path.with_suffix('.tmp')
                with open(temp_path, 'w', encoding='utf-8') as f:
                    json.dump(data, f, indent=2)
                temp_path.replace(self._json_path)
            except (OSError, ValueError) as e:
                raise PersistenceError(f"Failed to write JSON backup: {e}") from e

        logger.debug(f"Appended entry to JSON backup [kb={entry.kb}] [path={self._json_path}]")


class FanOutMetadataWriter(MetadataWriter):
    def __init__(self, primary: MetadataWriter, secondaries: Sequence[MetadataWriter] = ()):
        self.primary = primary
        self.secondaries = list(secondaries)

    def write(self, entry: MetadataEntry) -> None:
        self.primary.write(entry)

        for secondary in self.secondaries:
            try:
                secondary.write(entry)
            except Exception as e:
                logger.error(
                    f"Secondary metadata write failed: {e} "
                    f"[kb={entry.kb}] [writer={type(secondary).__name__}]",
                    exc_info=True
                )
