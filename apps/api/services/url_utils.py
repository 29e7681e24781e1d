"""URL helpers: site roots, site-relative page paths, validation."""

from urllib.parse import urlparse, urlunparse

DEFAULT_PORTS = {"http": 80, "https": 443}


def is_valid_url(url: str) -> bool:
    """True for absolute http(s) URLs with a host."""
    if not url or not url.strip():
        return False
    try:
        parsed = urlparse(url.strip())
        _ = parsed.port  # raises ValueError on a malformed port
    except ValueError:
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.hostname)


def _netloc(scheme: str, host: str, port: int | None) -> str:
    if port is not None and port != DEFAULT_PORTS.get(scheme):
        return f"{host}:{port}"
    return host


def site_root(url: str) -> str:
    """
    Returns scheme://host for url.

    Rules:
    - lowercase scheme and hostname
    - remove default ports (80 for http, 443 for https)
    - no trailing slash
    """
    parsed = urlparse(url.strip())
    host = (parsed.hostname or "").lower()
    if not host:
        return url.strip().rstrip("/")
    scheme = (parsed.scheme or "https").lower()
    return urlunparse((scheme, _netloc(scheme, host, parsed.port), "", "", "", ""))


def page_path(url: str) -> str:
    """Site-relative path of url: path plus query, '/' for the root. Fragment dropped."""
    parsed = urlparse(url.strip())
    path = parsed.path or "/"
    if parsed.query:
        path = f"{path}?{parsed.query}"
    return path


def page_url(site_url: str, path: str) -> str:
    """Absolute URL for a site-relative path."""
    return site_url.rstrip("/") + (path if path.startswith("/") else "/" + path)
