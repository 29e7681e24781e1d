"""Configured sites loader. The site list is a JSON array of {url, name}."""

import json
from dataclasses import dataclass
from pathlib import Path

from apps.api.services.settings import settings
from apps.api.services.url_utils import site_root

# Default path relative to project root
DEFAULT_SITES_PATH = Path(__file__).resolve().parent.parent.parent.parent / "config" / "sites.json"


@dataclass(frozen=True)
class SiteConfig:
    url: str
    name: str


def load_sites(path: str | Path | None = None) -> list[SiteConfig]:
    """Load configured sites. Urls are normalized to scheme://host."""
    if path is None:
        path = settings.SITES_CONFIG_PATH or DEFAULT_SITES_PATH
    with open(Path(path), encoding="utf-8") as f:
        raw = json.load(f)
    sites = []
    for item in raw:
        url = site_root(item["url"])
        sites.append(SiteConfig(url=url, name=item.get("name") or url))
    return sites


def find_site_config(sites: list[SiteConfig], url: str) -> SiteConfig | None:
    """Return the configured site owning url (same scheme and host), or None."""
    root = site_root(url)
    for site in sites:
        if site.url == root:
            return site
    return None
