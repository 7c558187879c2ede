from fastapi import APIRouter, HTTPException
from fastapi.responses import FileResponse

from app.storage.files import resolve_stored_file

router = APIRouter(tags=["documents"])


@router.get("/files/{doc_id}/{filename}")
def download_file(doc_id: str, filename: str) -> FileResponse:
    try:
        path = resolve_stored_file(doc_id, filename)
    except FileNotFoundError:
        raise HTTPException(status_code=404, detail="File not found.")

    return FileResponse(path, filename=path.name)
