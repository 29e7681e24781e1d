"""Indexing control: start/stop a full run, reindex one page.

At most one run (full or single-page) is active at a time. The run state, the crawl
worker pool and the cancellation event are owned here and guarded by one lock.
Full run: one orchestration thread per site (crawl -> index), joined by a supervisor
thread that finishes the run.
"""

import logging
import threading
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from enum import Enum
from functools import lru_cache

from apps.api.models.site import Site, SiteStatus
from apps.api.services import repo
from apps.api.services.crawl import CrawlMode, FetchedPage, SiteCrawler, fetch_page
from apps.api.services.errors import (
    CrawlError,
    IndexingAlreadyRunningError,
    IndexingNotRunningError,
    InvalidUrlError,
    PageOutOfScopeError,
)
from apps.api.services.indexing import IndexingCancelled, IndexingPipeline
from apps.api.services.morphology import LemmaExtractor
from apps.api.services.settings import settings
from apps.api.services.sites_config import SiteConfig, find_site_config, load_sites
from apps.api.services.url_utils import is_valid_url, page_path

logger = logging.getLogger(__name__)

STOPPED_BY_USER = "Indexing stopped by user"


class RunState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


class IndexingController:
    def __init__(
        self,
        sites: list[SiteConfig],
        pipeline: IndexingPipeline,
        *,
        workers: int = settings.CRAWL_WORKERS,
        delay: float = settings.CRAWL_DELAY,
        fetch: Callable[[str], tuple[int, str]] = fetch_page,
    ):
        self.sites = sites
        self.pipeline = pipeline
        self.workers = max(workers, 1)
        self.delay = delay
        self.fetch = fetch

        self._lock = threading.Lock()
        self._state = RunState.IDLE
        self._executor: ThreadPoolExecutor | None = None
        self._cancel = threading.Event()
        self._supervisor: threading.Thread | None = None
        self._failures = 0

    @property
    def state(self) -> RunState:
        with self._lock:
            return self._state

    def is_running(self) -> bool:
        return self.state is RunState.RUNNING

    # --- control surface ---

    def start_full_indexing(self) -> None:
        """Begin crawl + index of every configured site in the background."""
        self._begin_run()
        logger.info("Full indexing started sites=%d", len(self.sites))
        self._start_supervisor(self._run_full, "indexing-supervisor")

    def stop_indexing(self) -> None:
        """Signal cancellation to the active run; sites still INDEXING become FAILED."""
        with self._lock:
            if self._state is not RunState.RUNNING:
                raise IndexingNotRunningError()
            self._cancel.set()
            if self._executor is not None:
                self._executor.shutdown(wait=False, cancel_futures=True)
        updated = repo.fail_indexing_sites(STOPPED_BY_USER)
        logger.info("Indexing stop requested sites_marked_failed=%d", updated)

    def reindex_page(self, url: str) -> None:
        """
        Remove the stored copy of url (if any) from the index, then crawl and index it again
        in the background. Validation and guard errors are raised before any state changes.
        """
        url = (url or "").strip()
        if not is_valid_url(url):
            raise InvalidUrlError()
        config = find_site_config(self.sites, url)
        if config is None:
            raise PageOutOfScopeError()

        self._begin_run()
        try:
            site = repo.find_site_by_url(config.url)
            if site is None:
                site = repo.create_site(config.url, config.name, SiteStatus.INDEXING)
            else:
                # a stop during the run must find the site INDEXING to mark it FAILED
                repo.update_site_status(site.id, SiteStatus.INDEXING)
            existing = repo.find_page_by_path(site.id, page_path(url))
            if existing is not None:
                self.pipeline.remove_page(existing)
        except Exception:
            self._finish(failed=True)
            raise
        logger.info("Page reindex started url=%s", url)
        self._start_supervisor(lambda: self._run_single(site, url), "reindex-page")

    def wait(self, timeout: float | None = None) -> bool:
        """Block until the current background run finishes. True when no run is active."""
        supervisor = self._supervisor
        if supervisor is not None:
            supervisor.join(timeout)
        return not self.is_running()

    # --- run lifecycle ---

    def _begin_run(self) -> None:
        with self._lock:
            if self._state is RunState.RUNNING:
                raise IndexingAlreadyRunningError()
            self._state = RunState.RUNNING
            self._cancel = threading.Event()
            self._failures = 0
            self._executor = ThreadPoolExecutor(max_workers=self.workers, thread_name_prefix="crawl")

    def _start_supervisor(self, target: Callable[[], None], name: str) -> None:
        def run() -> None:
            try:
                target()
            except Exception:
                logger.exception("Indexing run failed")
                self._record_failure()
            finally:
                self._finish()

        self._supervisor = threading.Thread(target=run, name=name, daemon=True)
        self._supervisor.start()

    def _finish(self, failed: bool = False) -> None:
        with self._lock:
            if self._executor is not None:
                self._executor.shutdown(wait=False, cancel_futures=True)
                self._executor = None
            if self._cancel.is_set():
                self._state = RunState.CANCELLED
            elif failed or self._failures:
                self._state = RunState.FAILED
            else:
                self._state = RunState.COMPLETED
            state = self._state
        if state is RunState.CANCELLED:
            repo.fail_indexing_sites(STOPPED_BY_USER)
        logger.info("Indexing finished state=%s", state.value)

    def _record_failure(self) -> None:
        with self._lock:
            self._failures += 1

    def _new_crawler(self, site: Site) -> SiteCrawler:
        def on_page(_page: FetchedPage) -> None:
            repo.touch_site_status_time(site.id)

        return SiteCrawler(
            site.url,
            self._executor,
            cancel_event=self._cancel,
            delay=self.delay,
            fetch=self.fetch,
            on_page=on_page,
        )

    def _run_full(self) -> None:
        threads = []
        for config in self.sites:
            if self._cancel.is_set():
                break
            if repo.delete_site_by_url(config.url):
                logger.info("Site deleted from DB before reindex url=%s", config.url)
            site = repo.create_site(config.url, config.name, SiteStatus.INDEXING)
            thread = threading.Thread(target=self._index_site, args=(site,), name=f"index-site-{site.id}", daemon=True)
            threads.append(thread)
            thread.start()
        for thread in threads:
            thread.join()

    def _index_site(self, site: Site) -> None:
        try:
            pages = self._new_crawler(site).crawl(site.url, CrawlMode.FULL_SITE)
            if self._cancel.is_set():
                return
            self.pipeline.index_pages(pages, site, cancel_event=self._cancel)
        except IndexingCancelled:
            logger.info("Indexing cancelled site=%s", site.url)
        except CrawlError as e:
            logger.error("Crawl failed site=%s error=%s", site.url, e)
            repo.update_site_status(site.id, SiteStatus.FAILED, last_error=str(e))
            self._record_failure()
        except Exception as e:
            logger.exception("Indexing failed site=%s", site.url)
            repo.update_site_status(site.id, SiteStatus.FAILED, last_error=str(e))
            self._record_failure()

    def _run_single(self, site: Site, url: str) -> None:
        try:
            pages = self._new_crawler(site).crawl(url, CrawlMode.SINGLE_PAGE)
        except CrawlError as e:
            logger.error("Page fetch failed url=%s error=%s", url, e)
            repo.update_site_status(site.id, SiteStatus.FAILED, last_error=str(e))
            self._record_failure()
            return
        if self._cancel.is_set():
            return
        target = page_path(url)
        for page in pages:
            if page_path(page.url) == target:
                self.pipeline.index_page(page, site)
                return
        logger.warning("Page not fetched url=%s", url)


@lru_cache
def get_controller() -> IndexingController:
    """Process-wide controller built from settings and the configured sites."""
    pipeline = IndexingPipeline(LemmaExtractor())
    return IndexingController(load_sites(), pipeline)
