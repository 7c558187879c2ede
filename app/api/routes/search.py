from fastapi import APIRouter, Depends, HTTPException

from app.api.deps import get_document_store
from app.core.config import settings
from app.models.documents import ClearIndexResponse, DebugResponse, IndexedFileOut
from app.models.search import SearchMatchOut, SearchRequest, SearchResultOut
from app.services.search.engine import QueryEngine, SearchResult, default_match_config
from app.services.search.store import DocumentStore

router = APIRouter(tags=["search"])


def _result_out(r: SearchResult) -> SearchResultOut:
    return SearchResultOut(
        filename=r.filename,
        file_type=r.file_type,
        matches=[
            SearchMatchOut(
                line=m.line,
                page=m.page,
                snippet=m.snippet,
                context=m.context,
                exact_match=m.exact_match,
                match_type=m.match_type,
            )
            for m in r.matches
        ],
        file_url=r.file_url,
        file_id=r.file_id,
        total_matches=r.total_matches,
        exact_matches=r.exact_matches,
    )


@router.post("/search", response_model=list[SearchResultOut])
def search(
    body: SearchRequest,
    store: DocumentStore = Depends(get_document_store),
) -> list[SearchResultOut]:
    """
    Search all indexed files.
    A query with whitespace is a phrase query, otherwise a single-term query.
    """
    query = (body.query or "").strip()
    if not query:
        raise HTTPException(status_code=400, detail="Invalid or missing query")
    if len(query) > settings.MAX_QUERY_CHARS:
        raise HTTPException(status_code=400, detail="Query too long.")

    engine = QueryEngine(store, default_match_config())

    return [_result_out(r) for r in engine.search(query)]


@router.get("/debug", response_model=DebugResponse)
def debug(store: DocumentStore = Depends(get_document_store)) -> DebugResponse:
    """
    What is currently in the search index.
    """
    records = store.all()

    return DebugResponse(
        total_files=len(records),
        files=[
            IndexedFileOut(
                filename=r.filename,
                file_type=r.file_type,
                content_preview=r.content[: settings.PREVIEW_CHARS] + "...",
                file_url=r.file_url,
                file_id=r.file_id,
                line_count=len(r.lines),
                page_count=len(r.pages),
            )
            for r in records
        ],
    )


@router.delete("/index", response_model=ClearIndexResponse)
def clear_index(store: DocumentStore = Depends(get_document_store)) -> ClearIndexResponse:
    return ClearIndexResponse(cleared=store.clear())
