"""Indexing control endpoints: start/stop full indexing, reindex one page.

All three return immediately; progress is observed through GET /api/statistics.
Guard and validation errors are answered by the IndexingError handler in main.
"""

from fastapi import APIRouter

from apps.api.schemas.responses import IndexingResponse
from apps.api.services.deps import Controller

router = APIRouter()


@router.get("/startIndexing", response_model=IndexingResponse, response_model_exclude_none=True)
def start_indexing(controller: Controller) -> IndexingResponse:
    """Full crawl + index of every configured site. 400 if a run is already active."""
    controller.start_full_indexing()
    return IndexingResponse(result=True)


@router.get("/stopIndexing", response_model=IndexingResponse, response_model_exclude_none=True)
def stop_indexing(controller: Controller) -> IndexingResponse:
    """Cancel the active run. 400 if nothing is running."""
    controller.stop_indexing()
    return IndexingResponse(result=True)


@router.post("/indexPage", response_model=IndexingResponse, response_model_exclude_none=True)
def index_page(url: str, controller: Controller) -> IndexingResponse:
    """Delete-then-reindex one page of a configured site."""
    controller.reindex_page(url)
    return IndexingResponse(result=True)
