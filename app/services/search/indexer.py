from __future__ import annotations

import time

from app.services.ingestion.structure import ExtractedContent
from app.services.search.records import FileRecord
from app.services.search.store import DocumentStore


def new_file_id() -> str:
    # millisecond timestamp token
    return str(int(time.time() * 1000))


def index_document(
    store: DocumentStore,
    *,
    filename: str,
    file_type: str,
    extracted: ExtractedContent,
    file_url: str | None = None,
    file_id: str | None = None,
) -> FileRecord:
    """
    Build the FileRecord for an extracted document and upsert it.
    A file indexed again under the same filename replaces the old record.
    """
    record = FileRecord(
        filename=filename,
        file_type=file_type,
        content=extracted.text,
        lines=list(extracted.lines),
        pages=list(extracted.pages),
        file_url=file_url or f"/files/{filename}",
        file_id=file_id or new_file_id(),
    )
    store.upsert(filename, record)

    return record
