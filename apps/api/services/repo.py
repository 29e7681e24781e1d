"""Repository layer for site, page, lemma and search_index.

RULE: Repo is the ONLY place allowed to run DB reads/writes (session.execute, get_db).
Returned ORM objects are detached (expire_on_commit=False); relationships are not loaded.
"""

from collections.abc import Iterable, Sequence
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import delete, func, insert, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from apps.api.db import get_db
from apps.api.models.index_entry import IndexEntry
from apps.api.models.lemma import Lemma
from apps.api.models.page import Page
from apps.api.models.site import Site, SiteStatus


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _chunks(items: Sequence[Any], size: int) -> Iterable[Sequence[Any]]:
    size = max(size, 1)
    for i in range(0, len(items), size):
        yield items[i:i + size]


# --- site ---


def find_site_by_url(url: str) -> Site | None:
    with get_db() as session:
        return session.scalars(select(Site).where(Site.url == url)).first()


def find_site_by_id(site_id: int) -> Site | None:
    with get_db() as session:
        return session.get(Site, site_id)


def list_sites() -> list[Site]:
    with get_db() as session:
        return list(session.scalars(select(Site).order_by(Site.id)).all())


def create_site(url: str, name: str | None, status: SiteStatus = SiteStatus.INDEXING) -> Site:
    """Insert a site row with status and status_time=now."""
    with get_db() as session:
        site = Site(url=url, name=name, status=status, status_time=_now(), last_error=None)
        session.add(site)
        session.flush()
        return site


def save_site(site: Site) -> Site:
    """Upsert by primary key; refreshes nothing else."""
    with get_db() as session:
        return session.merge(site)


def delete_site_by_url(url: str) -> int:
    """Delete site by url; pages, lemmas and index rows go with it (FK cascade). Returns rows deleted."""
    with get_db() as session:
        result = session.execute(delete(Site).where(Site.url == url))
        return result.rowcount or 0


def update_site_status(site_id: int, status: SiteStatus, last_error: str | None = None) -> None:
    """Set status, last_error and status_time=now."""
    with get_db() as session:
        session.execute(
            update(Site)
            .where(Site.id == site_id)
            .values(status=status, last_error=last_error, status_time=_now())
        )


def touch_site_status_time(site_id: int) -> None:
    with get_db() as session:
        session.execute(update(Site).where(Site.id == site_id).values(status_time=_now()))


def fail_indexing_sites(last_error: str) -> int:
    """Move every site still INDEXING to FAILED with last_error. Returns rows updated."""
    with get_db() as session:
        result = session.execute(
            update(Site)
            .where(Site.status == SiteStatus.INDEXING)
            .values(status=SiteStatus.FAILED, last_error=last_error, status_time=_now())
        )
        return result.rowcount or 0


# --- page ---


def find_page_by_path(site_id: int, path: str) -> Page | None:
    with get_db() as session:
        return session.scalars(select(Page).where(Page.site_id == site_id, Page.path == path)).first()


def save_page(site_id: int, path: str, code: int, content: str) -> Page:
    """Upsert a page by (site_id, path)."""
    return save_pages(site_id, [(path, code, content)])[0]


def save_pages(site_id: int, pages: Sequence[tuple[str, int, str]], batch_size: int = 100) -> list[Page]:
    """
    Upsert pages by (site_id, path) in batches of batch_size, one transaction per batch.
    Each item: (path, code, content). Later duplicates of a path replace earlier ones.
    Returns the persisted pages (with ids) in input order, one per distinct path.
    """
    unique: dict[str, tuple[str, int, str]] = {}
    for item in pages:
        unique[item[0]] = item
    items = list(unique.values())
    saved: list[Page] = []
    for batch in _chunks(items, batch_size):
        with get_db() as session:
            saved.extend(_upsert_pages(session, site_id, batch))
    return saved


def _upsert_pages(session: Session, site_id: int, batch: Sequence[tuple[str, int, str]]) -> list[Page]:
    paths = [p for p, _, _ in batch]
    existing = {
        page.path: page
        for page in session.scalars(select(Page).where(Page.site_id == site_id, Page.path.in_(paths))).all()
    }
    pages = []
    for path, code, content in batch:
        page = existing.get(path)
        if page is None:
            page = Page(site_id=site_id, path=path, code=code, content=content)
            session.add(page)
        else:
            page.code = code
            page.content = content
        pages.append(page)
    session.flush()
    return pages


def list_pages_by_site(site_id: int) -> list[Page]:
    with get_db() as session:
        return list(session.scalars(select(Page).where(Page.site_id == site_id).order_by(Page.id)).all())


def get_pages_by_ids(page_ids: Iterable[int]) -> dict[int, Page]:
    ids = list(page_ids)
    if not ids:
        return {}
    with get_db() as session:
        return {p.id: p for p in session.scalars(select(Page).where(Page.id.in_(ids))).all()}


def count_pages_by_site(site_id: int) -> int:
    with get_db() as session:
        return session.scalar(select(func.count()).select_from(Page).where(Page.site_id == site_id)) or 0


def count_pages() -> int:
    with get_db() as session:
        return session.scalar(select(func.count()).select_from(Page)) or 0


# --- lemma ---


def find_lemmas_by_site(site_id: int) -> list[Lemma]:
    with get_db() as session:
        return list(session.scalars(select(Lemma).where(Lemma.site_id == site_id).order_by(Lemma.id)).all())


def find_lemmas_below_threshold(
    lemmas: Iterable[str],
    threshold: int,
    site_id: int | None = None,
) -> list[Lemma]:
    """
    Lemma rows whose lemma is in lemmas and frequency < threshold, ordered by frequency ASC
    (ties by id for determinism). site_id narrows to one site; None searches all sites.
    """
    names = sorted(set(lemmas))
    if not names:
        return []
    stmt = select(Lemma).where(Lemma.lemma.in_(names), Lemma.frequency < threshold)
    if site_id is not None:
        stmt = stmt.where(Lemma.site_id == site_id)
    stmt = stmt.order_by(Lemma.frequency.asc(), Lemma.id.asc())
    with get_db() as session:
        return list(session.scalars(stmt).all())


def increment_lemma_frequencies(
    site_id: int,
    increments: dict[str, int],
    batch_size: int = 1000,
) -> dict[str, int]:
    """
    Upsert lemmas of a site in batches: existing rows get frequency += increment,
    missing rows are created with frequency = increment. Returns {lemma: lemma_id}.
    """
    ids: dict[str, int] = {}
    names = sorted(increments)
    for batch in _chunks(names, batch_size):
        with get_db() as session:
            ids.update(_upsert_lemmas(session, site_id, {name: increments[name] for name in batch}))
    return ids


def _upsert_lemmas(session: Session, site_id: int, increments: dict[str, int]) -> dict[str, int]:
    existing = {
        lemma.lemma: lemma
        for lemma in session.scalars(
            select(Lemma).where(Lemma.site_id == site_id, Lemma.lemma.in_(list(increments)))
        ).all()
    }
    rows = []
    for name, increment in increments.items():
        row = existing.get(name)
        if row is None:
            row = Lemma(site_id=site_id, lemma=name, frequency=increment)
            session.add(row)
        else:
            row.frequency = row.frequency + increment
        rows.append(row)
    session.flush()
    return {row.lemma: row.id for row in rows}


def _decrement_lemmas(session: Session, lemma_ids: Iterable[int]) -> None:
    ids = sorted(set(lemma_ids))
    if ids:
        session.execute(update(Lemma).where(Lemma.id.in_(ids)).values(frequency=Lemma.frequency - 1))


def _delete_nonpositive_lemmas(session: Session, site_id: int) -> int:
    stmt = delete(Lemma).where(Lemma.site_id == site_id, Lemma.frequency <= 0)
    return session.execute(stmt).rowcount or 0


def count_lemmas_by_site(site_id: int) -> int:
    with get_db() as session:
        return session.scalar(select(func.count()).select_from(Lemma).where(Lemma.site_id == site_id)) or 0


def count_lemmas() -> int:
    with get_db() as session:
        return session.scalar(select(func.count()).select_from(Lemma)) or 0


# --- search_index ---


def find_index_by_page(page_id: int) -> list[IndexEntry]:
    with get_db() as session:
        return list(session.scalars(select(IndexEntry).where(IndexEntry.page_id == page_id)).all())


def find_index_by_lemma_ids(lemma_ids: Iterable[int]) -> list[tuple[int, int, float]]:
    """Rows (lemma_id, page_id, rank) for the given lemma ids, ordered by lemma_id, page_id."""
    ids = sorted(set(lemma_ids))
    if not ids:
        return []
    stmt = (
        select(IndexEntry.lemma_id, IndexEntry.page_id, IndexEntry.rank)
        .where(IndexEntry.lemma_id.in_(ids))
        .order_by(IndexEntry.lemma_id, IndexEntry.page_id)
    )
    with get_db() as session:
        return [(r[0], r[1], float(r[2])) for r in session.execute(stmt).all()]


def save_index_entries(rows: Sequence[tuple[int, int, float]], batch_size: int = 1000) -> None:
    """Bulk insert index rows (page_id, lemma_id, rank), one transaction per batch."""
    for batch in _chunks(rows, batch_size):
        with get_db() as session:
            _insert_index_rows(session, batch)


def _insert_index_rows(session: Session, rows: Sequence[tuple[int, int, float]]) -> None:
    if rows:
        session.execute(
            insert(IndexEntry),
            [{"page_id": page_id, "lemma_id": lemma_id, "rank": rank} for page_id, lemma_id, rank in rows],
        )


# --- single-page index changes (one transaction each) ---


def save_page_index(site_id: int, path: str, code: int, content: str, lemmas: dict[str, int]) -> Page:
    """
    Upsert one page, add 1 to the frequency of each of its lemmas and insert its index rows
    (rank = count on the page). Commits all of it or nothing.
    """
    with get_db() as session:
        page = _upsert_pages(session, site_id, [(path, code, content)])[0]
        if lemmas:
            ids = _upsert_lemmas(session, site_id, {lemma: 1 for lemma in lemmas})
            _insert_index_rows(session, [(page.id, ids[lemma], float(count)) for lemma, count in lemmas.items()])
        return page


def remove_page_from_index(page_id: int, site_id: int) -> int:
    """
    Delete a page with its index rows, decrement each lemma it referenced and drop the site's
    lemmas that reach 0. Commits all of it or nothing. Returns the number of lemmas touched.
    """
    with get_db() as session:
        lemma_ids = set(session.scalars(select(IndexEntry.lemma_id).where(IndexEntry.page_id == page_id)).all())
        session.execute(delete(IndexEntry).where(IndexEntry.page_id == page_id))
        _decrement_lemmas(session, lemma_ids)
        _delete_nonpositive_lemmas(session, site_id)
        session.execute(delete(Page).where(Page.id == page_id))
        return len(lemma_ids)


def ping() -> bool:
    """True when the database answers SELECT 1."""
    try:
        with get_db() as session:
            session.execute(select(1))
        return True
    except SQLAlchemyError:
        return False
