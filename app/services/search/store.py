from __future__ import annotations

import logging
import threading

from app.services.search.records import FileRecord

logger = logging.getLogger(__name__)


class DocumentStore:
    """
    In-memory filename -> FileRecord mapping.

    Sync routes run in FastAPI's worker threads, so every access goes
    through one lock. `all()` hands out a copy: a query scans a snapshot
    and never sees a half-applied upsert or clear.
    """

    def __init__(self) -> None:
        self._records: dict[str, FileRecord] = {}
        self._lock = threading.Lock()

    def upsert(self, filename: str, record: FileRecord) -> None:
        with self._lock:
            self._records[filename] = record
            total = len(self._records)

        logger.info("Added %s to search index. Total files: %d", filename, total)

    def get(self, filename: str) -> FileRecord | None:
        with self._lock:
            return self._records.get(filename)

    def all(self) -> list[FileRecord]:
        with self._lock:
            return list(self._records.values())

    def count(self) -> int:
        with self._lock:
            return len(self._records)

    def clear(self) -> int:
        with self._lock:
            removed = len(self._records)
            self._records.clear()

        logger.info("Search index cleared (%d files removed)", removed)
        return removed
