import logging

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from fastapi.concurrency import run_in_threadpool

from app.api.deps import get_document_store
from app.core.config import settings
from app.models.documents import (
    ExtractTextResponse,
    PageOut,
    ProcessRequest,
    ProcessResponse,
)
from app.services.ingestion.extractors import detect_file_type, extract_document
from app.services.ingestion.structure import (
    ExtractedContent,
    fallback_content,
    paginate_lines,
    split_lines,
)
from app.services.search.indexer import index_document
from app.services.search.records import Page
from app.services.search.store import DocumentStore
from app.storage.files import read_upload_bytes

router = APIRouter(tags=["documents"])
logger = logging.getLogger(__name__)


def _page_out(p: Page) -> PageOut:
    return PageOut(
        page_number=p.page_number,
        content=p.content,
        start_line=p.start_line,
        end_line=p.end_line,
    )


@router.post("/extract-text", response_model=ExtractTextResponse)
async def extract_text(file: UploadFile = File(...)) -> ExtractTextResponse:
    """
    Extract text, lines and pages from a single file without indexing it.
    """
    filename = file.filename or "file"

    try:
        data = await read_upload_bytes(file, settings.MAX_UPLOAD_MB * 1024 * 1024)
    except ValueError:
        raise HTTPException(
            status_code=413, detail=f"File exceeds max size {settings.MAX_UPLOAD_MB} MB."
        )
    finally:
        await file.close()

    logger.info("Extracting text from: %s, type: %s, size: %d", filename, file.content_type, len(data))

    extracted = await run_in_threadpool(extract_document, filename, file.content_type, data)

    return ExtractTextResponse(
        success=True,
        filename=filename,
        file_type=file.content_type or detect_file_type(filename),
        extracted_text=extracted.text,
        extracted_lines=extracted.lines,
        extracted_pages=[_page_out(p) for p in extracted.pages],
        text_length=len(extracted.text),
        line_count=len(extracted.lines),
        page_count=len(extracted.pages),
        is_real_content=extracted.is_real_content,
    )


def _content_from_request(body: ProcessRequest, file_type: str) -> ExtractedContent:
    text = body.file_content or ""
    if not text.strip():
        logger.info("No real content available, using fallback content for: %s", body.filename)
        return fallback_content(body.filename, file_type)

    if body.extracted_lines is not None:
        lines = body.extracted_lines
    else:
        lines = split_lines(text)

    if body.extracted_pages is not None:
        try:
            pages = [
                Page(
                    page_number=p.page_number,
                    content=p.content,
                    start_line=p.start_line,
                    end_line=p.end_line,
                )
                for p in body.extracted_pages
            ]
        except ValueError:
            raise HTTPException(status_code=400, detail="Invalid page span in extractedPages.")
    else:
        pages = paginate_lines(lines)

    return ExtractedContent(text=text, lines=lines, pages=pages)


@router.post("/process", response_model=ProcessResponse)
def process(
    body: ProcessRequest,
    store: DocumentStore = Depends(get_document_store),
) -> ProcessResponse:
    """
    Add already-extracted content (see /extract-text) to the search index.
    """
    logger.info("Processing file: %s", body.filename)

    file_type = detect_file_type(body.filename, body.file_type)
    extracted = _content_from_request(body, file_type)

    index_document(
        store,
        filename=body.filename,
        file_type=file_type,
        extracted=extracted,
        file_url=body.file_url,
        file_id=body.file_id,
    )

    return ProcessResponse(
        success=True,
        processed=body.filename,
        index_size=store.count(),
        content_length=len(extracted.text),
        line_count=len(extracted.lines),
        page_count=len(extracted.pages),
        is_real_content=extracted.is_real_content,
    )
