"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

logging.basicConfig(level=logging.INFO)

from apps.api.db import ensure_tables
from apps.api.routes import health, indexing, search, statistics
from apps.api.services.errors import IndexingError, SearchError


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Ensure tables exist on startup (SQLite/dev; Postgres uses Alembic)."""
    ensure_tables()
    yield


app = FastAPI(
    title="Lemma Search Engine",
    version="0.1.0",
    lifespan=lifespan,
)


@app.exception_handler(IndexingError)
async def indexing_error_handler(request: Request, exc: IndexingError) -> JSONResponse:
    """Guard/validation errors of the control surface: no state was mutated."""
    return JSONResponse(status_code=400, content={"result": False, "error": str(exc)})


@app.exception_handler(SearchError)
async def search_error_handler(request: Request, exc: SearchError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"result": False, "error": str(exc)})


app.include_router(health.router, tags=["health"])
app.include_router(indexing.router, prefix="/api", tags=["indexing"])
app.include_router(search.router, prefix="/api", tags=["search"])
app.include_router(statistics.router, prefix="/api", tags=["statistics"])
