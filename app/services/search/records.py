from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Page:
    """
    A contiguous window of lines inside one indexed file.
    start_line / end_line are 1-based and inclusive.
    """

    page_number: int
    content: str
    start_line: int
    end_line: int

    def __post_init__(self) -> None:
        if self.page_number < 1 or self.start_line < 1 or self.end_line < self.start_line:
            raise ValueError("INVALID_PAGE_SPAN")

    def contains(self, line_number: int) -> bool:
        return self.start_line <= line_number <= self.end_line


@dataclass(frozen=True)
class FileRecord:
    """
    Everything the search index keeps about one file.

    Records are immutable: re-indexing a file builds a new record and
    replaces the old one as a whole. Coverage of `lines` by `pages` is not
    checked here, the query engine falls back to page 1 for lines that no
    page claims.
    """

    filename: str
    file_type: str
    content: str
    lines: list[str]
    file_url: str
    file_id: str
    pages: list[Page] = field(default_factory=list)
