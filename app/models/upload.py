from typing import Optional

from pydantic import BaseModel


class UploadItemResponse(BaseModel):
    filename: str
    status: str

    doc_id: Optional[str] = None
    content_type: Optional[str] = None
    file_type: Optional[str] = None
    size_bytes: Optional[int] = None
    sha256: Optional[str] = None
    file_url: Optional[str] = None

    line_count: Optional[int] = None
    page_count: Optional[int] = None
    is_real_content: Optional[bool] = None

    error_detail: Optional[str] = None


class UploadResponse(BaseModel):
    documents: list[UploadItemResponse]
    has_errors: bool
    index_size: int
