from fastapi import HTTPException, Request

from app.services.search.store import DocumentStore


def get_document_store(request: Request) -> DocumentStore:
    store = getattr(request.app.state, "document_store", None)
    if store is None:
        raise HTTPException(status_code=500, detail="Search index not initialized.")

    return store
