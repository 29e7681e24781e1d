"""FastAPI dependencies for the indexing controller and the search engine."""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from apps.api.services.indexing_control import IndexingController, get_controller
from apps.api.services.morphology import LemmaExtractor
from apps.api.services.search import SearchEngine


@lru_cache
def get_search_engine() -> SearchEngine:
    return SearchEngine(LemmaExtractor())


Controller = Annotated[IndexingController, Depends(get_controller)]
Engine = Annotated[SearchEngine, Depends(get_search_engine)]
