"""Statistics endpoint: GET /api/statistics."""

from fastapi import APIRouter

from apps.api.schemas.responses import StatisticsResponse
from apps.api.services.deps import Controller
from apps.api.services.statistics import get_statistics

router = APIRouter()


@router.get("/statistics", response_model=StatisticsResponse, response_model_by_alias=True)
def statistics(controller: Controller) -> StatisticsResponse:
    """Totals and per-site status, page and lemma counts."""
    data = get_statistics(controller.sites, indexing=controller.is_running())
    return StatisticsResponse(result=True, statistics=data)
