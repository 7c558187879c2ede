from __future__ import annotations

import io
import logging
import re
from pathlib import Path

import docx  # python-docx
import fitz  # PyMuPDF
from openpyxl import load_workbook
from pptx import Presentation

from app.core.config import settings
from app.services.ingestion.structure import (
    ExtractedContent,
    fallback_content,
    structure_text,
)

logger = logging.getLogger(__name__)

MIME_BY_EXTENSION: dict[str, str] = {
    ".txt": "text/plain",
    ".pdf": "application/pdf",
    ".doc": "application/msword",
    ".docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    ".xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    ".pptx": "application/vnd.openxmlformats-officedocument.presentationml.presentation",
}

# legacy .doc cleanup
CONTROL_RE = re.compile(r"[\x00-\x1F\x7F-\x9F]")
NON_PRINTABLE_RE = re.compile(r"[^\x20-\x7E\s]")
WS_RE = re.compile(r"\s+")
LINE_BREAK_RE = re.compile(r"[\r\n]+")
DOC_WORD_RE = re.compile(r"^[a-zA-Z0-9\-_.,!?'\"]+$")


def detect_file_type(filename: str, declared: str | None = None) -> str:
    suffix = Path(filename or "").suffix.lower()
    if suffix in MIME_BY_EXTENSION:
        return MIME_BY_EXTENSION[suffix]

    return declared or "unknown"


def _decode(data: bytes) -> str:
    return data.decode("utf-8", errors="replace")


def extract_txt_text(data: bytes) -> str:
    return _decode(data)


def extract_pdf_text(data: bytes) -> str:
    try:
        doc = fitz.open(stream=data, filetype="pdf")
    except Exception as e:
        raise ValueError(f"INVALID_PDF: {e}") from e

    try:
        if doc.is_encrypted:
            # Try empty password; if fails, reject
            ok = doc.authenticate("")
            if not ok and doc.is_encrypted:
                raise ValueError("ENCRYPTED_PDF")

        if doc.page_count > settings.MAX_PDF_PAGES:
            raise ValueError("PDF_TOO_MANY_PAGES")

        parts = [doc.load_page(i).get_text("text") for i in range(doc.page_count)]
    finally:
        doc.close()

    return "\n".join(parts).replace("\x00", " ")


def extract_docx_text(data: bytes) -> str:
    try:
        document = docx.Document(io.BytesIO(data))
    except Exception as e:
        raise ValueError(f"INVALID_DOCX: {e}") from e

    parts = [p.text for p in document.paragraphs if p.text]

    # tables are not part of document.paragraphs
    for table in document.tables:
        for row in table.rows:
            cells = [cell.text.strip() for cell in row.cells if cell.text.strip()]
            if cells:
                parts.append(" | ".join(cells))

    return "\n".join(parts).strip()


def extract_doc_text(data: bytes) -> str:
    """
    Best-effort text recovery from legacy binary .doc files.

    Keeps only lines that look like prose (at least 3 word-like tokens,
    more than 10 chars); with 5 or fewer such lines the file is treated
    as unreadable.
    """
    lines: list[str] = []
    for raw in LINE_BREAK_RE.split(_decode(data)):
        line = CONTROL_RE.sub(" ", raw)
        line = NON_PRINTABLE_RE.sub(" ", line)
        line = WS_RE.sub(" ", line).strip()

        words = [w for w in line.split(" ") if len(w) > 2 and DOC_WORD_RE.match(w)]
        if len(words) >= 3 and len(line) > 10:
            lines.append(line)

    if len(lines) <= 5:
        raise ValueError("DOC_NO_READABLE_TEXT")

    return "\n".join(lines)


def extract_xlsx_text(data: bytes) -> str:
    try:
        wb = load_workbook(io.BytesIO(data), read_only=True, data_only=True)
    except Exception as e:
        raise ValueError(f"INVALID_XLSX: {e}") from e

    parts: list[str] = []
    try:
        for sheet_name in wb.sheetnames:
            ws = wb[sheet_name]
            parts.append(f"Sheet: {sheet_name}")

            for row in ws.iter_rows(values_only=True):
                cells = ["" if cell is None else str(cell) for cell in row]
                if any(c.strip() for c in cells):
                    parts.append(" | ".join(cells))
    finally:
        wb.close()

    return "\n".join(parts)


def extract_pptx_text(data: bytes) -> str:
    try:
        prs = Presentation(io.BytesIO(data))
    except Exception as e:
        raise ValueError(f"INVALID_PPTX: {e}") from e

    parts: list[str] = []
    for slide in prs.slides:
        for shape in slide.shapes:
            if shape.has_text_frame and shape.text_frame.text.strip():
                parts.append(shape.text_frame.text)

    return "\n".join(parts)


EXTRACTORS = {
    ".txt": extract_txt_text,
    ".pdf": extract_pdf_text,
    ".docx": extract_docx_text,
    ".doc": extract_doc_text,
    ".xlsx": extract_xlsx_text,
    ".pptx": extract_pptx_text,
}


def extract_document(filename: str, content_type: str | None, data: bytes) -> ExtractedContent:
    """
    Bytes -> text structured into lines and pages.

    Never fails: unreadable or empty files are indexed with a short
    placeholder text (is_real_content=False).
    """
    suffix = Path(filename or "").suffix.lower()
    file_type = detect_file_type(filename, content_type)

    if (content_type or "").lower() == "text/plain":
        extractor = extract_txt_text
    else:
        extractor = EXTRACTORS.get(suffix, extract_txt_text)

    try:
        text = extractor(data)
    except ValueError as e:
        logger.warning("Text extraction failed for %s (%s): %s", filename, file_type, e)
        return fallback_content(filename, file_type)

    extracted = structure_text(text)
    if not extracted.lines:
        logger.info("No text extracted from %s, using fallback content", filename)
        return fallback_content(filename, file_type)

    logger.info(
        "Extracted %d characters, %d lines from %s",
        len(extracted.text),
        len(extracted.lines),
        filename,
    )

    return extracted
