"""Response schemas for API endpoints. Contract-frozen: extra fields forbidden."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class IndexingResponse(BaseModel):
    """Response for startIndexing / stopIndexing / indexPage. error only when result is false."""

    model_config = ConfigDict(extra="forbid")

    result: bool
    error: str | None = None


class SearchData(BaseModel):
    """A single search hit."""

    model_config = ConfigDict(extra="forbid")

    site: str
    site_name: str | None = Field(None, serialization_alias="siteName")
    uri: str
    title: str
    snippet: str
    relevance: float


class SearchResponse(BaseModel):
    """Response for GET /api/search. count is the total match count, data one page of it."""

    model_config = ConfigDict(extra="forbid")

    result: bool
    error: str | None = None
    count: int = 0
    data: list[SearchData] = Field(default_factory=list)


class TotalStatistics(BaseModel):
    model_config = ConfigDict(extra="forbid")

    sites: int
    pages: int
    lemmas: int
    indexing: bool


class DetailedStatisticsItem(BaseModel):
    model_config = ConfigDict(extra="forbid")

    url: str
    name: str | None = None
    status: str | None = None
    status_time: datetime | None = Field(None, serialization_alias="statusTime")
    error: str | None = None
    pages: int
    lemmas: int


class StatisticsData(BaseModel):
    model_config = ConfigDict(extra="forbid")

    total: TotalStatistics
    detailed: list[DetailedStatisticsItem] = Field(default_factory=list)


class StatisticsResponse(BaseModel):
    """Response for GET /api/statistics."""

    model_config = ConfigDict(extra="forbid")

    result: bool
    statistics: StatisticsData
