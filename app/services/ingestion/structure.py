from __future__ import annotations

import re
from dataclasses import dataclass, field

from app.core.config import settings
from app.services.search.records import Page

NEWLINE_RE = re.compile(r"\r?\n")


@dataclass(frozen=True)
class ExtractedContent:
    text: str
    lines: list[str]
    pages: list[Page] = field(default_factory=list)
    is_real_content: bool = True


def split_lines(text: str) -> list[str]:
    """
    Trimmed, non-empty lines in document order.
    """
    lines = (line.strip() for line in NEWLINE_RE.split(text or ""))

    return [line for line in lines if line]


def paginate_lines(lines: list[str], lines_per_page: int | None = None) -> list[Page]:
    """
    Group lines into fixed-size pages:
        lines 1..25 -> page 1, 26..50 -> page 2, ...
    The last page holds whatever is left.
    """
    size = settings.LINES_PER_PAGE if lines_per_page is None else lines_per_page
    if size < 1:
        raise ValueError("INVALID_LINES_PER_PAGE")

    pages: list[Page] = []
    for i in range(0, len(lines), size):
        page_lines = lines[i : i + size]
        pages.append(
            Page(
                page_number=i // size + 1,
                content="\n".join(page_lines),
                start_line=i + 1,
                end_line=i + len(page_lines),
            )
        )

    return pages


def structure_text(text: str, lines_per_page: int | None = None) -> ExtractedContent:
    lines = split_lines(text)

    return ExtractedContent(text=text, lines=lines, pages=paginate_lines(lines, lines_per_page))


def fallback_text(filename: str, file_type: str) -> str:
    return f"Unable to extract text from {filename}. File type: {file_type}"


def fallback_content(filename: str, file_type: str) -> ExtractedContent:
    """
    Placeholder indexed when a file yields no text, so it still shows up
    in the index (and in searches for its own name).
    """
    extracted = structure_text(fallback_text(filename, file_type))

    return ExtractedContent(
        text=extracted.text,
        lines=extracted.lines,
        pages=extracted.pages,
        is_real_content=False,
    )
