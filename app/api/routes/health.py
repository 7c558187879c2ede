from fastapi import APIRouter, Depends

from app.api.deps import get_document_store
from app.core.config import settings
from app.services.search.store import DocumentStore

router = APIRouter(tags=["health"])


@router.get("/health")
def health(store: DocumentStore = Depends(get_document_store)) -> dict:
    return {"status": "ok", "env": settings.ENV, "indexed_files": store.count()}
