from __future__ import annotations

import logging
import uuid
from pathlib import Path

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from fastapi.concurrency import run_in_threadpool

from app.api.deps import get_document_store
from app.core.config import settings
from app.models.upload import UploadItemResponse, UploadResponse
from app.services.ingestion.extractors import detect_file_type, extract_document
from app.services.search.indexer import index_document
from app.services.search.store import DocumentStore
from app.storage.files import read_first_bytes, save_upload_file_streaming, sniff_magic

router = APIRouter(tags=["documents"])
logger = logging.getLogger(__name__)


def _validate_extension(filename: str) -> None:
    suffix = Path(filename).suffix.lower()
    if suffix not in settings.ALLOWED_EXTENSIONS:
        raise HTTPException(
            status_code=400,
            detail=f"Unsupported file extension '{suffix}'. Allowed: {settings.ALLOWED_EXTENSIONS}",
        )


@router.post("/upload", response_model=UploadResponse)
async def upload(
    files: list[UploadFile] = File(...),
    store: DocumentStore = Depends(get_document_store),
) -> UploadResponse:
    """
    Upload one or more documents, store them on disk, extract their text
    and add them to the search index.

    - One bad file won't fail the whole request
    - size limit per file
    - max files per request
    - magic-bytes sniff
    - atomic write + safe filenames
    - re-uploading a filename replaces its entry in the index
    """
    if not files:
        raise HTTPException(status_code=400, detail="No files provided.")

    if len(files) > settings.MAX_FILES_PER_REQUEST:
        raise HTTPException(
            status_code=400,
            detail=f"Too many files. Max allowed: {settings.MAX_FILES_PER_REQUEST}.",
        )

    max_bytes = settings.MAX_UPLOAD_MB * 1024 * 1024
    results: list[UploadItemResponse] = []
    has_errors = False

    for f in files:
        filename = f.filename or "file"

        try:
            _validate_extension(filename)

            first = await read_first_bytes(f, 16)
            if not sniff_magic(filename, first):
                raise HTTPException(
                    status_code=415,
                    detail=f"Magic-bytes verification failed for '{filename}'.",
                )

            doc_id = uuid.uuid4().hex
            saved = await save_upload_file_streaming(
                upload_file=f,
                doc_id=doc_id,
                max_bytes=max_bytes,
            )
            logger.info("Uploaded %s (%d bytes) -> %s", filename, saved.size_bytes, saved.file_url)

            data = Path(saved.stored_path).read_bytes()
            extracted = await run_in_threadpool(
                extract_document, saved.original_filename, saved.content_type, data
            )

            file_type = detect_file_type(saved.original_filename, saved.content_type)
            index_document(
                store,
                filename=saved.original_filename,
                file_type=file_type,
                extracted=extracted,
                file_url=saved.file_url,
                file_id=saved.doc_id,
            )

            results.append(
                UploadItemResponse(
                    filename=saved.original_filename,
                    status="ok",
                    doc_id=saved.doc_id,
                    content_type=saved.content_type,
                    file_type=file_type,
                    size_bytes=saved.size_bytes,
                    sha256=saved.sha256,
                    file_url=saved.file_url,
                    line_count=len(extracted.lines),
                    page_count=len(extracted.pages),
                    is_real_content=extracted.is_real_content,
                )
            )

        except HTTPException as e:
            has_errors = True
            results.append(
                UploadItemResponse(
                    filename=filename,
                    status="error",
                    error_detail=str(e.detail),
                )
            )
        except ValueError as e:
            # file too large from storage layer
            has_errors = True
            if str(e) == "FILE_TOO_LARGE":
                detail = f"File exceeds max size {settings.MAX_UPLOAD_MB} MB."
            else:
                detail = "Upload failed due to an internal validation error."
            results.append(UploadItemResponse(filename=filename, status="error", error_detail=detail))

    return UploadResponse(documents=results, has_errors=has_errors, index_size=store.count())
