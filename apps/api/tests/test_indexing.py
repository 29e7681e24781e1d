"""Indexing pipeline: page rows, lemma frequency = distinct pages, rank = occurrences."""

import threading
from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError

from apps.api.models.site import SiteStatus
from apps.api.services import repo
from apps.api.services.crawl import FetchedPage
from apps.api.services.errors import PersistenceError
from apps.api.services.indexing import IndexingCancelled, IndexingPipeline

from apps.api.tests.conftest import SITE_NAME, SITE_URL, html_page


def _page(path: str, body: str, status: int = 200, title: str = "") -> FetchedPage:
    return FetchedPage(url=f"{SITE_URL}{path}", status_code=status, content=html_page(body, title=title))


def _frequencies(site_id: int) -> dict[str, int]:
    return {lemma.lemma: lemma.frequency for lemma in repo.find_lemmas_by_site(site_id)}


def _ranks(site_id: int, path: str) -> dict[str, float]:
    page = repo.find_page_by_path(site_id, path)
    names = {lemma.id: lemma.lemma for lemma in repo.find_lemmas_by_site(site_id)}
    return {names[e.lemma_id]: e.rank for e in repo.find_index_by_page(page.id)}


@pytest.fixture
def site():
    return repo.create_site(SITE_URL, SITE_NAME, SiteStatus.INDEXING)


def test_frequency_counts_pages_and_rank_counts_occurrences(pipeline, site) -> None:
    pipeline.index_pages([_page("/a", "кот кот собака"), _page("/b", "собака")], site)

    assert _frequencies(site.id) == {"кот": 1, "собака": 2}
    assert _ranks(site.id, "/a") == {"кот": 2.0, "собака": 1.0}
    assert _ranks(site.id, "/b") == {"собака": 1.0}
    assert repo.find_site_by_id(site.id).status == SiteStatus.INDEXED


def test_inflected_forms_share_one_lemma(pipeline, site) -> None:
    pipeline.index_pages([_page("/a", "Кот, кота и котов"), _page("/b", "коты")], site)

    assert _frequencies(site.id) == {"кот": 2}
    assert _ranks(site.id, "/a") == {"кот": 3.0}


def test_non_200_pages_are_stored_without_index_rows(pipeline, site) -> None:
    pipeline.index_pages([_page("/", "кот"), _page("/gone", "собака", status=404)], site)

    gone = repo.find_page_by_path(site.id, "/gone")
    assert gone is not None
    assert gone.code == 404
    assert repo.find_index_by_page(gone.id) == []
    assert _frequencies(site.id) == {"кот": 1}


def test_page_paths_are_site_relative(pipeline, site) -> None:
    pipeline.index_pages([_page("", "кот"), _page("/list?page=2", "собака")], site)

    assert {p.path for p in repo.list_pages_by_site(site.id)} == {"/", "/list?page=2"}


def test_parallel_lemmatization_matches_sequential(extractor, site) -> None:
    pages = [_page(f"/p{i}", "кот собака" if i % 2 else "кот дом дома") for i in range(12)]
    IndexingPipeline(extractor, workers=4, lemma_batch_size=2, page_batch_size=5).index_pages(pages, site)

    assert _frequencies(site.id) == {"кот": 12, "собака": 6, "дом": 6}
    assert _ranks(site.id, "/p0") == {"кот": 1.0, "дом": 2.0}


def test_cancel_event_stops_before_marking_indexed(pipeline, site) -> None:
    cancel = threading.Event()
    cancel.set()
    with pytest.raises(IndexingCancelled):
        pipeline.index_pages([_page("/a", "кот")], site, cancel_event=cancel)
    assert repo.find_site_by_id(site.id).status == SiteStatus.INDEXING


def test_db_failure_becomes_persistence_error(pipeline, site) -> None:
    error = OperationalError("INSERT", {}, Exception("disk I/O error"))
    with patch("apps.api.services.indexing.repo.save_pages", side_effect=error):
        with pytest.raises(PersistenceError, match="Failed to save indexing batch"):
            pipeline.index_pages([_page("/a", "кот")], site)


def test_remove_page_decrements_and_collects_lemmas(pipeline, site) -> None:
    pipeline.index_pages([_page("/a", "кот собака"), _page("/b", "собака")], site)
    page_a = repo.find_page_by_path(site.id, "/a")

    pipeline.remove_page(page_a)

    assert repo.find_page_by_path(site.id, "/a") is None
    assert repo.find_index_by_page(page_a.id) == []
    # "кот" only lived on /a and is gone; "собака" drops to one page
    assert _frequencies(site.id) == {"собака": 1}


def test_index_page_after_remove_restores_the_same_state(pipeline, site) -> None:
    pipeline.index_pages([_page("/a", "кот кот собака"), _page("/b", "собака")], site)
    before = (_frequencies(site.id), _ranks(site.id, "/a"))

    for _ in range(2):
        pipeline.remove_page(repo.find_page_by_path(site.id, "/a"))
        pipeline.index_page(_page("/a", "кот кот собака"), site)

    assert (_frequencies(site.id), _ranks(site.id, "/a")) == before
    assert repo.count_pages_by_site(site.id) == 2


def test_failed_remove_page_leaves_index_untouched(pipeline, site) -> None:
    pipeline.index_pages([_page("/a", "кот"), _page("/b", "кот")], site)
    page_a = repo.find_page_by_path(site.id, "/a")
    ranks_before = _ranks(site.id, "/a")

    error = OperationalError("UPDATE", {}, Exception("disk I/O error"))
    with patch("apps.api.services.repo._decrement_lemmas", side_effect=error):
        with pytest.raises(PersistenceError):
            pipeline.remove_page(page_a)

    assert repo.find_page_by_path(site.id, "/a") is not None
    assert _ranks(site.id, "/a") == ranks_before
    assert _frequencies(site.id) == {"кот": 2}

    pipeline.remove_page(repo.find_page_by_path(site.id, "/a"))
    pipeline.index_page(_page("/a", "кот"), site)
    assert _frequencies(site.id) == {"кот": 2}


def test_failed_index_page_saves_nothing(pipeline, site) -> None:
    pipeline.index_pages([_page("/b", "кот")], site)

    error = OperationalError("INSERT", {}, Exception("disk I/O error"))
    with patch("apps.api.services.repo._insert_index_rows", side_effect=error):
        with pytest.raises(PersistenceError):
            pipeline.index_page(_page("/a", "кот собака"), site)

    assert repo.find_page_by_path(site.id, "/a") is None
    assert _frequencies(site.id) == {"кот": 1}


def test_index_page_with_new_content(pipeline, site) -> None:
    pipeline.index_pages([_page("/a", "кот")], site)
    pipeline.remove_page(repo.find_page_by_path(site.id, "/a"))

    saved = pipeline.index_page(_page("/a", "собака собака"), site)

    assert saved.path == "/a"
    assert _frequencies(site.id) == {"собака": 1}
    assert _ranks(site.id, "/a") == {"собака": 2.0}
    assert repo.find_site_by_id(site.id).status == SiteStatus.INDEXED


def test_index_page_non_200_has_no_lemmas(pipeline, site) -> None:
    saved = pipeline.index_page(_page("/x", "кот", status=500), site)
    assert saved.code == 500
    assert repo.find_index_by_page(saved.id) == []
    assert _frequencies(site.id) == {}


def test_title_words_are_indexed(pipeline, site) -> None:
    pipeline.index_pages([_page("/a", "собака", title="Дом")], site)
    assert _frequencies(site.id) == {"дом": 1, "собака": 1}
