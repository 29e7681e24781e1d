"""Indexing pipeline: fetched pages -> page rows, lemma frequencies, search_index rows.

Flow per site: save pages (batches of PAGE_BATCH_SIZE) -> lemmatize every HTTP 200 page ->
upsert lemma frequencies (+1 per distinct page) -> save index rows (batches of LEMMA_BATCH_SIZE)
-> site INDEXED.
"""

import logging
import threading
from collections import Counter
from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor

from sqlalchemy.exc import SQLAlchemyError

from apps.api.models.page import Page
from apps.api.models.site import Site, SiteStatus
from apps.api.services import repo
from apps.api.services.crawl import FetchedPage
from apps.api.services.errors import PersistenceError
from apps.api.services.extract import extract_text
from apps.api.services.morphology import LemmaExtractor
from apps.api.services.settings import settings
from apps.api.services.url_utils import page_path

logger = logging.getLogger(__name__)

HTTP_OK = 200


class IndexingCancelled(Exception):
    """Raised between batches when the run was stopped."""


class IndexingPipeline:
    def __init__(
        self,
        extractor: LemmaExtractor,
        *,
        lemma_batch_size: int = settings.LEMMA_BATCH_SIZE,
        page_batch_size: int = settings.PAGE_BATCH_SIZE,
        workers: int = 1,
    ):
        self.extractor = extractor
        self.lemma_batch_size = lemma_batch_size
        self.page_batch_size = page_batch_size
        self.workers = max(workers, 1)

    def page_lemmas(self, page: Page) -> Counter:
        """{lemma: rank} for one page; empty for non-200 pages."""
        return self._lemmas(page.code, page.content)

    def _lemmas(self, code: int, content: str) -> Counter:
        if code != HTTP_OK:
            return Counter()
        return self.extractor.collect_lemmas(extract_text(content))

    def index_pages(
        self,
        pages: Iterable[FetchedPage],
        site: Site,
        *,
        cancel_event: threading.Event | None = None,
    ) -> None:
        """Index a full-site crawl result. Sets the site INDEXED on completion."""
        items = [(page_path(p.url), p.status_code, p.content) for p in pages]
        saved = self._persist(lambda: repo.save_pages(site.id, items, self.page_batch_size))
        logger.info("Pages saved site=%s count=%d", site.url, len(saved))
        _check_cancel(cancel_event)

        frequencies: Counter = Counter()
        freq_lock = threading.Lock()
        per_page: list[tuple[int, Counter]] = []

        def process(page: Page) -> None:
            lemmas = self.page_lemmas(page)
            if not lemmas:
                return
            with freq_lock:
                for lemma in lemmas:
                    frequencies[lemma] += 1
                per_page.append((page.id, lemmas))

        content_pages = [p for p in saved if p.code == HTTP_OK]
        if self.workers > 1:
            with ThreadPoolExecutor(max_workers=self.workers, thread_name_prefix="lemmatize") as ex:
                list(ex.map(process, content_pages))
        else:
            for page in content_pages:
                process(page)
        _check_cancel(cancel_event)

        self._save_lemmas_and_index(site, frequencies, per_page)
        _check_cancel(cancel_event)
        repo.update_site_status(site.id, SiteStatus.INDEXED)
        logger.info("Site indexed site=%s pages=%d lemmas=%d", site.url, len(content_pages), len(frequencies))

    def index_page(self, page: FetchedPage, site: Site) -> Page:
        """Index one page (single-page reindex). The old copy must already be removed."""
        path = page_path(page.url)
        lemmas = self._lemmas(page.status_code, page.content)
        saved = self._persist(
            lambda: repo.save_page_index(site.id, path, page.status_code, page.content, dict(lemmas))
        )
        repo.update_site_status(site.id, SiteStatus.INDEXED)
        logger.info("Page indexed site=%s path=%s lemmas=%d", site.url, path, len(lemmas))
        return saved

    def remove_page(self, page: Page) -> None:
        """
        Drop a page from the index in one transaction: delete its index rows, decrement frequency
        of every lemma it referenced, delete lemmas that fall to <= 0, delete the page row.
        """
        touched = self._persist(lambda: repo.remove_page_from_index(page.id, page.site_id))
        logger.info("Page removed from index page_id=%s path=%s lemmas=%d", page.id, page.path, touched)

    def _save_lemmas_and_index(
        self,
        site: Site,
        frequencies: Counter,
        per_page: list[tuple[int, Counter]],
    ) -> None:
        def run() -> None:
            ids = repo.increment_lemma_frequencies(site.id, dict(frequencies), self.lemma_batch_size)
            rows = [
                (page_id, ids[lemma], float(count))
                for page_id, lemmas in per_page
                for lemma, count in lemmas.items()
            ]
            repo.save_index_entries(rows, self.lemma_batch_size)

        self._persist(run)

    def _persist(self, fn):
        try:
            return fn()
        except SQLAlchemyError as e:
            logger.exception("Batch save failed")
            raise PersistenceError(f"Failed to save indexing batch: {e}") from e


def _check_cancel(cancel_event: threading.Event | None) -> None:
    if cancel_event is not None and cancel_event.is_set():
        raise IndexingCancelled()
