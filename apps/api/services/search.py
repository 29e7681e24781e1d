"""Lemma search: query -> ranked, paginated pages with title and snippet.

Flow: site gate -> lemmatize query -> drop lemmas with frequency >= threshold (rarest first)
-> per-site page-set intersection -> proximity filter (policy) -> relevance = sum of ranks,
normalized by the max -> stable sort -> paginate -> title/snippet.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum

from apps.api.models.lemma import Lemma
from apps.api.models.site import Site, SiteStatus
from apps.api.services import repo
from apps.api.services.errors import EmptyQueryError, SiteNotIndexedError
from apps.api.services.extract import extract_text, extract_title
from apps.api.services.morphology import LemmaExtractor
from apps.api.services.settings import settings
from apps.api.services.snippet import build_snippet, query_words, words_in_proximity
from apps.api.services.url_utils import site_root

logger = logging.getLogger(__name__)


class ProximityPolicy(str, Enum):
    ON = "on"
    OFF = "off"


@dataclass
class SearchResult:
    site: str
    site_name: str | None
    uri: str
    title: str
    snippet: str
    relevance: float


@dataclass
class SearchPage:
    count: int
    results: list[SearchResult] = field(default_factory=list)


@dataclass
class _Candidate:
    page_id: int
    site_id: int
    absolute: float = 0.0
    relevance: float = 0.0


def paginate(total: int, offset: int, limit: int) -> tuple[int, int]:
    """Clamp offset to [0, total] and limit to >= 1. Returns slice (start, end)."""
    offset = max(offset, 0)
    limit = max(limit, 1)
    start = min(offset, total)
    end = min(start + limit, total)
    return start, end


def relative_relevance(absolute: float, max_absolute: float) -> float:
    """absolute / max rounded half-up to 4 places; 0 when max is 0."""
    if max_absolute <= 0:
        return 0.0
    value = Decimal(str(absolute / max_absolute)).quantize(Decimal("0.0001"), rounding=ROUND_HALF_UP)
    return float(value)


def intersect_pages(lemma_ids: list[int], pages_by_lemma: dict[int, dict[int, float]]) -> list[int]:
    """
    Ordered intersection: seed with the first (rarest) lemma's pages, keep only pages present
    for each following lemma, stop early when empty. Returns page ids ascending.
    """
    candidates: set[int] | None = None
    for lemma_id in lemma_ids:
        pages = set(pages_by_lemma.get(lemma_id, {}))
        candidates = pages if candidates is None else candidates & pages
        if not candidates:
            return []
    return sorted(candidates or ())


class SearchEngine:
    def __init__(
        self,
        extractor: LemmaExtractor,
        *,
        frequency_threshold: int = settings.FREQUENCY_THRESHOLD,
        proximity: ProximityPolicy = ProximityPolicy.ON if settings.PROXIMITY_FILTER else ProximityPolicy.OFF,
        proximity_window: int = settings.PROXIMITY_WINDOW,
    ):
        self.extractor = extractor
        self.frequency_threshold = frequency_threshold
        self.proximity = proximity
        self.proximity_window = proximity_window

    def search(self, query: str, site: str | None = None, offset: int = 0, limit: int = 20) -> SearchPage:
        """
        Run a ranked search. site narrows to one configured site root (must be INDEXED).
        Raises EmptyQueryError, SiteNotIndexedError.
        """
        if not query or not query.strip():
            raise EmptyQueryError()
        scope = self._resolve_scope(site)

        query_lemmas = self.extractor.collect_lemmas(query)
        lemmas = repo.find_lemmas_below_threshold(
            query_lemmas.keys(), self.frequency_threshold, site_id=scope.id if scope else None
        )
        if not lemmas:
            logger.info("Search no lemmas below threshold query=%r site=%s", query, site)
            return SearchPage(count=0)

        candidates = self._candidates(lemmas)
        pages = repo.get_pages_by_ids(c.page_id for c in candidates)
        candidates = [c for c in candidates if c.page_id in pages]
        texts = {page_id: extract_text(page.content) for page_id, page in pages.items()}

        if self.proximity is ProximityPolicy.ON:
            words = query_words(query)
            candidates = [
                c for c in candidates if words_in_proximity(texts.get(c.page_id, ""), words, self.proximity_window)
            ]

        self._score(candidates)
        ranked = sorted(candidates, key=lambda c: c.relevance, reverse=True)
        start, end = paginate(len(ranked), offset, limit)

        sites = {s.id: s for s in repo.list_sites()}
        results = []
        for c in ranked[start:end]:
            page = pages[c.page_id]
            owner = sites.get(c.site_id)
            results.append(
                SearchResult(
                    site=owner.url if owner else "",
                    site_name=owner.name if owner else None,
                    uri=page.path,
                    title=extract_title(page.content),
                    snippet=build_snippet(texts[c.page_id], query),
                    relevance=c.relevance,
                )
            )
        logger.info("Search query=%r site=%s total=%d returned=%d", query, site, len(ranked), len(results))
        return SearchPage(count=len(ranked), results=results)

    def _resolve_scope(self, site: str | None) -> Site | None:
        if site is None or not site.strip():
            return None
        row = repo.find_site_by_url(site_root(site))
        if row is None or row.status != SiteStatus.INDEXED:
            raise SiteNotIndexedError(site)
        return row

    def _candidates(self, lemmas: list[Lemma]) -> list[_Candidate]:
        """Per-site ordered intersection; sites in order of their rarest lemma."""
        by_site: dict[int, list[Lemma]] = defaultdict(list)
        for lemma in lemmas:
            by_site[lemma.site_id].append(lemma)

        pages_by_lemma: dict[int, dict[int, float]] = defaultdict(dict)
        for lemma_id, page_id, rank in repo.find_index_by_lemma_ids(lemma.id for lemma in lemmas):
            pages_by_lemma[lemma_id][page_id] = rank

        candidates = []
        for site_id, site_lemmas in by_site.items():
            lemma_ids = [lemma.id for lemma in site_lemmas]
            for page_id in intersect_pages(lemma_ids, pages_by_lemma):
                absolute = sum(pages_by_lemma[lemma_id].get(page_id, 0.0) for lemma_id in lemma_ids)
                candidates.append(_Candidate(page_id=page_id, site_id=site_id, absolute=absolute))
        return candidates

    def _score(self, candidates: list[_Candidate]) -> None:
        if not candidates:
            return
        max_absolute = max(c.absolute for c in candidates)
        for c in candidates:
            c.relevance = relative_relevance(c.absolute, max_absolute)
