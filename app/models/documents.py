from typing import Optional

from pydantic import Field

from app.models.search import CamelModel


class PageOut(CamelModel):
    page_number: int = Field(..., ge=1)
    content: str
    start_line: int = Field(..., ge=1)
    end_line: int = Field(..., ge=1)


class ExtractTextResponse(CamelModel):
    success: bool
    filename: str
    file_type: str
    extracted_text: str
    extracted_lines: list[str]
    extracted_pages: list[PageOut]
    text_length: int
    line_count: int
    page_count: int
    is_real_content: bool


class ProcessRequest(CamelModel):
    filename: str = Field(..., min_length=1)
    file_url: Optional[str] = None
    file_type: Optional[str] = None
    file_id: Optional[str] = None
    file_content: Optional[str] = None
    extracted_lines: Optional[list[str]] = None
    extracted_pages: Optional[list[PageOut]] = None


class ProcessResponse(CamelModel):
    success: bool
    processed: str
    index_size: int
    content_length: int
    line_count: int
    page_count: int
    is_real_content: bool


class IndexedFileOut(CamelModel):
    filename: str
    file_type: str
    content_preview: str
    file_url: str
    file_id: str
    line_count: int
    page_count: int


class DebugResponse(CamelModel):
    total_files: int
    files: list[IndexedFileOut]


class ClearIndexResponse(CamelModel):
    cleared: int
