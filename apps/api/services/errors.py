"""Error taxonomy for indexing control and search."""


class IndexingError(RuntimeError):
    """Base for errors reported synchronously by the indexing control surface."""

    message = "Indexing error"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.message)


class IndexingAlreadyRunningError(IndexingError):
    message = "Indexing is already running"


class IndexingNotRunningError(IndexingError):
    message = "Indexing is not running"


class PageOutOfScopeError(IndexingError):
    message = "This page is outside the sites listed in the configuration file"


class InvalidUrlError(IndexingError, ValueError):
    message = "Invalid page url"


class SearchError(ValueError):
    """Base for errors reported synchronously by search."""


class EmptyQueryError(SearchError):
    def __init__(self):
        super().__init__("Empty search query")


class SiteNotIndexedError(SearchError):
    def __init__(self, site: str):
        super().__init__(f"Index for site {site} is not ready or missing")
        self.site = site


class CrawlError(RuntimeError):
    """Unrecoverable crawl failure. Recorded as the site's last_error."""


class PersistenceError(RuntimeError):
    """Batch save failed. Fatal to the current indexing run."""
