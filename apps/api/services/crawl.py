"""Site crawler: recursive link discovery on a shared worker pool.

Each visited URL is one pool task: wait the politeness delay, fetch, record the page,
then submit a task for every admitted link not yet visited. A wait-group (pending
counter + condition) tells the crawl root when the whole task tree has finished.
"""

import logging
import threading
from collections.abc import Callable
from concurrent.futures import Executor, Future
from dataclasses import dataclass
from enum import Enum

import requests

from apps.api.services.crawl_rules import classify_link
from apps.api.services.errors import CrawlError
from apps.api.services.extract import extract_links
from apps.api.services.settings import settings
from apps.api.services.url_utils import page_path, site_root

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = settings.CRAWL_TIMEOUT
DEFAULT_USER_AGENT = settings.CRAWL_USER_AGENT
DEFAULT_REFERRER = settings.CRAWL_REFERRER


@dataclass(frozen=True)
class FetchedPage:
    url: str
    status_code: int
    content: str


class CrawlMode(str, Enum):
    FULL_SITE = "full_site"
    SINGLE_PAGE = "single_page"


def fetch_page(
    url: str,
    *,
    timeout: float = DEFAULT_TIMEOUT,
    user_agent: str = DEFAULT_USER_AGENT,
    referrer: str = DEFAULT_REFERRER,
) -> tuple[int, str]:
    """
    Fetch a single URL. No recursion.
    Content-type and HTTP error statuses are not checked: a 404 is returned as (404, body).
    Raises requests.RequestException on network failure.
    """
    resp = requests.get(
        url,
        timeout=timeout,
        headers={"User-Agent": user_agent, "Referer": referrer},
        allow_redirects=True,
    )
    logger.debug("Fetched url=%s status=%s", url, resp.status_code)
    return resp.status_code, resp.text


class SiteCrawler:
    """
    One crawl run over one site. Not reusable: create a new instance per run.

    fetch: url -> (status_code, body); raises requests.RequestException on network failure.
    on_page: called for every recorded page (used to refresh the site's status_time).
    """

    def __init__(
        self,
        site_url: str,
        executor: Executor,
        *,
        cancel_event: threading.Event | None = None,
        delay: float = settings.CRAWL_DELAY,
        fetch: Callable[[str], tuple[int, str]] = fetch_page,
        on_page: Callable[[FetchedPage], None] | None = None,
    ):
        self.site_url = site_url
        self._executor = executor
        self._cancel = cancel_event or threading.Event()
        self._delay = delay
        self._fetch = fetch
        self._on_page = on_page

        self._visited: set[str] = set()
        self._visited_lock = threading.Lock()
        self._pages: dict[str, FetchedPage] = {}
        self._pages_lock = threading.Lock()

        self._pending = 0
        self._done_cond = threading.Condition()

        self._root_key = ""
        self._boundary = ""
        self._exact = False
        self._error: BaseException | None = None
        self._aborted = threading.Event()

    @property
    def cancelled(self) -> bool:
        return self._cancel.is_set()

    def crawl(self, seed_url: str, mode: CrawlMode = CrawlMode.FULL_SITE) -> set[FetchedPage]:
        """
        Crawl from seed_url and block until every spawned task finished or was cancelled.
        FULL_SITE: boundary is the site URL prefix. SINGLE_PAGE: boundary is seed_url itself.
        Raises CrawlError when the seed cannot be fetched or a task fails unexpectedly.
        """
        self._root_key = _page_key(seed_url)
        if mode is CrawlMode.SINGLE_PAGE:
            self._boundary, self._exact = seed_url, True
        else:
            self._boundary, self._exact = self.site_url, False

        logger.info("Crawl start site=%s seed=%s mode=%s", self.site_url, seed_url, mode.value)
        self._mark_visited(seed_url)
        self._spawn(seed_url)
        with self._done_cond:
            while self._pending > 0:
                self._done_cond.wait(timeout=1.0)

        if self._error is not None:
            raise CrawlError(str(self._error) or type(self._error).__name__) from self._error
        with self._pages_lock:
            pages = set(self._pages.values())
        logger.info(
            "Crawl finished site=%s pages=%d cancelled=%s", self.site_url, len(pages), self.cancelled
        )
        return pages

    def _mark_visited(self, url: str) -> bool:
        """Atomic insert-if-absent on the page key. True when url was not visited before."""
        key = _page_key(url)
        with self._visited_lock:
            if key in self._visited:
                return False
            self._visited.add(key)
            return True

    def _spawn(self, url: str) -> None:
        if self.cancelled or self._aborted.is_set():
            return
        with self._done_cond:
            self._pending += 1
        try:
            future = self._executor.submit(self._visit, url)
        except RuntimeError:
            # pool already shut down (stop requested)
            logger.info("Crawl pool closed, not scheduling url=%s", url)
            self._task_done(None)
            return
        # also fires when the future is cancelled by shutdown(cancel_futures=True)
        future.add_done_callback(self._task_done)

    def _task_done(self, _future: Future | None) -> None:
        with self._done_cond:
            self._pending -= 1
            if self._pending <= 0:
                self._done_cond.notify_all()

    def _visit(self, url: str) -> None:
        try:
            self._visit_inner(url)
        except Exception as e:
            logger.exception("Crawl task failed url=%s", url)
            self._abort(e)

    def _abort(self, error: BaseException) -> None:
        with self._visited_lock:
            if self._error is None:
                self._error = error
        self._aborted.set()

    def _visit_inner(self, url: str) -> None:
        if self._cancel.wait(self._delay) or self._aborted.is_set():
            return
        try:
            status_code, body = self._fetch(url)
        except requests.RequestException as e:
            if _page_key(url) == self._root_key:
                self._abort(e)
            else:
                logger.warning("Fetch failed, link skipped url=%s error=%s", url, e)
            return

        page = FetchedPage(url=url, status_code=status_code, content=body or "")
        with self._pages_lock:
            self._pages[_page_key(url)] = page
        logger.info("Crawled url=%s status=%s", url, status_code)
        if self._on_page is not None:
            self._on_page(page)

        for link in extract_links(page.content, url):
            if self.cancelled or self._aborted.is_set():
                return
            allowed, reason = classify_link(link, self._boundary, exact=self._exact)
            if not allowed:
                logger.debug("Link skipped url=%s reason=%s", link, reason)
                continue
            if self._mark_visited(link):
                self._spawn(link)


def _page_key(url: str) -> str:
    """Visited-set key: "https://host/" and "https://host" name the same page."""
    return site_root(url) + page_path(url)
