"""SQLAlchemy models: site, page, lemma, search_index."""

from apps.api.models.base import Base
from apps.api.models.index_entry import IndexEntry
from apps.api.models.lemma import Lemma
from apps.api.models.page import Page
from apps.api.models.site import Site, SiteStatus

__all__ = [
    "Base",
    "IndexEntry",
    "Lemma",
    "Page",
    "Site",
    "SiteStatus",
]
