"""Crawl rules: decide whether a discovered link is admitted for traversal."""

from urllib.parse import urlparse

# Non-document resources (checked against the lowercased URL path)
FILE_EXTENSIONS = (
    ".jpg",
    ".jpeg",
    ".png",
    ".gif",
    ".webp",
    ".svg",
    ".bmp",
    ".ico",
    ".pdf",
    ".eps",
    ".doc",
    ".docx",
    ".xls",
    ".xlsx",
    ".ppt",
    ".pptx",
    ".sql",
    ".yaml",
    ".yml",
    ".zip",
    ".7z",
    ".rar",
    ".gz",
    ".tar",
)

# Query markers that only duplicate an existing page
DENY_QUERY_MARKERS = ("_ga=",)

REASON_OUT_OF_BOUNDARY = "out_of_boundary"
REASON_FRAGMENT = "fragment"
REASON_FILE = "file_resource"
REASON_TRACKING = "tracking_query"
REASON_NOT_HTTP = "not_http"


def is_file_link(url: str) -> bool:
    """True when the URL path ends with a known non-document extension."""
    path = urlparse(url).path.lower()
    return path.endswith(FILE_EXTENSIONS)


def is_within_boundary(url: str, boundary: str, *, exact: bool = False) -> bool:
    """
    Full-site boundary: url is the boundary URL or continues it with "/" or "?",
    so "https://site.ru.other.com" is outside "https://site.ru".
    Single-page boundary (exact=True): url is the boundary URL itself.
    """
    base = boundary.rstrip("/")
    if exact:
        return url.rstrip("/") == base
    return url == base or url.startswith(base + "/") or url.startswith(base + "?")


def classify_link(url: str, boundary: str, *, exact: bool = False) -> tuple[bool, str]:
    """
    Classify a resolved link for traversal.
    Returns (allowed, reason); reason is "" when allowed.
    Visited-set deduplication is the crawler's job, not a rule here.
    """
    if urlparse(url).scheme not in ("http", "https"):
        return False, REASON_NOT_HTTP
    if not is_within_boundary(url, boundary, exact=exact):
        return False, REASON_OUT_OF_BOUNDARY
    if "#" in url:
        return False, REASON_FRAGMENT
    if is_file_link(url):
        return False, REASON_FILE
    query = urlparse(url).query.lower()
    for marker in DENY_QUERY_MARKERS:
        if marker in query:
            return False, REASON_TRACKING
    return True, ""
