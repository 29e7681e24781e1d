"""Index statistics: totals and per-site detail."""

from apps.api.services import repo
from apps.api.services.sites_config import SiteConfig


def get_statistics(sites: list[SiteConfig], indexing: bool) -> dict:
    """
    Returns {total: {sites, pages, lemmas, indexing}, detailed: [...]}.
    Configured sites that were never indexed are reported with status None and zero counts.
    """
    stored = {site.url: site for site in repo.list_sites()}
    detailed = []
    for config in sites:
        site = stored.pop(config.url, None)
        detailed.append(_site_detail(config.url, config.name, site))
    # sites left in the DB from an older configuration
    for url, site in stored.items():
        detailed.append(_site_detail(url, site.name, site))

    return {
        "total": {
            "sites": len(detailed),
            "pages": sum(d["pages"] for d in detailed),
            "lemmas": sum(d["lemmas"] for d in detailed),
            "indexing": indexing,
        },
        "detailed": detailed,
    }


def _site_detail(url: str, name: str | None, site) -> dict:
    if site is None:
        return {
            "url": url,
            "name": name,
            "status": None,
            "status_time": None,
            "error": None,
            "pages": 0,
            "lemmas": 0,
        }
    return {
        "url": url,
        "name": name,
        "status": site.status.value,
        "status_time": site.status_time,
        "error": site.last_error,
        "pages": repo.count_pages_by_site(site.id),
        "lemmas": repo.count_lemmas_by_site(site.id),
    }
