"""Search endpoint: GET /api/search."""

from fastapi import APIRouter, Query

from apps.api.schemas.responses import SearchData, SearchResponse
from apps.api.services.deps import Engine

router = APIRouter()


@router.get("/search", response_model=SearchResponse, response_model_exclude_none=True, response_model_by_alias=True)
def search(
    engine: Engine,
    query: str = Query("", description="Search query"),
    site: str | None = Query(None, description="Site root URL to search in; all sites when omitted"),
    offset: int = Query(0, description="Results to skip"),
    limit: int = Query(20, description="Page size"),
) -> SearchResponse:
    """Ranked lemma search. 400 for an empty query or a site that is not INDEXED."""
    page = engine.search(query, site=site, offset=offset, limit=limit)
    return SearchResponse(
        result=True,
        count=page.count,
        data=[
            SearchData(
                site=r.site,
                site_name=r.site_name,
                uri=r.uri,
                title=r.title,
                snippet=r.snippet,
                relevance=r.relevance,
            )
            for r in page.results
        ],
    )
