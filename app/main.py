import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.api.routes.extract import router as extract_router
from app.api.routes.files import router as files_router
from app.api.routes.health import router as health_router
from app.api.routes.search import router as search_router
from app.api.routes.upload import router as upload_router
from app.core.config import settings
from app.core.logging import setup_logging
from app.services.search.store import DocumentStore

setup_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("%s started (env=%s, data_dir=%s)", settings.APP_NAME, settings.ENV, settings.DATA_DIR)

    yield

    # index lives only as long as the process
    app.state.document_store.clear()


app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)

# one store per app instance, shared by all requests
app.state.document_store = DocumentStore()

app.include_router(health_router)
app.include_router(upload_router)
app.include_router(extract_router)
app.include_router(search_router)
app.include_router(files_router)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error", extra={"path": request.url.path})

    return JSONResponse(status_code=500, content={"detail": "Internal Server Error"})
