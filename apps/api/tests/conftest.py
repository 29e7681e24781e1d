"""Pytest fixtures for API/service tests. Every test gets fresh tables in the test SQLite DB."""

import os

import pytest
import requests

os.environ.setdefault("ENV", "test")
os.environ.setdefault("CRAWL_DELAY", "0")

from apps.api.db import drop_tables, ensure_tables
from apps.api.services.indexing import IndexingPipeline
from apps.api.services.morphology import LemmaExtractor
from apps.api.services.sites_config import SiteConfig

# Mirror: use shared morphology fake from tests.conftest (single source of truth)
from tests.conftest import DictMorphology, extractor, morphology  # noqa: F401

SITE_URL = "https://cats.example.ru"
SITE_NAME = "Cats"
OTHER_SITE_URL = "https://dogs.example.ru"


@pytest.fixture(autouse=True)
def db_tables():
    """Create tables before each test and drop them after."""
    ensure_tables()
    yield
    drop_tables()


def html_page(body: str, title: str = "", links: list[str] | None = None) -> str:
    anchors = "".join(f'<a href="{href}">link</a>' for href in (links or []))
    return f"<html><head><title>{title}</title></head><body><p>{body}</p>{anchors}</body></html>"


class FakeWeb:
    """
    In-memory web for crawl tests: url -> (status, html). Callable as a crawler fetch.
    Unknown urls answer 404; urls in `broken` raise requests.ConnectionError.
    """

    def __init__(self, pages: dict[str, tuple[int, str]] | None = None, broken=()):
        self.pages = dict(pages or {})
        self.broken = set(broken)
        self.calls: list[str] = []

    def add(self, url: str, body: str, *, title: str = "", links=None, status: int = 200) -> None:
        self.pages[url] = (status, html_page(body, title=title, links=links))

    def __call__(self, url: str) -> tuple[int, str]:
        self.calls.append(url)
        if url in self.broken:
            raise requests.ConnectionError(f"connection refused: {url}")
        return self.pages.get(url, (404, "<html><body>not found</body></html>"))


@pytest.fixture
def pipeline(extractor) -> IndexingPipeline:
    return IndexingPipeline(extractor)


@pytest.fixture
def sites_config() -> list[SiteConfig]:
    return [SiteConfig(url=SITE_URL, name=SITE_NAME), SiteConfig(url=OTHER_SITE_URL, name="Dogs")]
