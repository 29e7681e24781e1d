"""search_index model: one (page, lemma) edge of the inverted index.

rank is the occurrence count of the lemma on the page.
"""

from sqlalchemy import Float, ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship

from apps.api.models.base import Base, BigIntId


class IndexEntry(Base):
    __tablename__ = "search_index"
    __table_args__ = (Index("ix_search_index_lemma_page", "lemma_id", "page_id"),)

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    page_id: Mapped[int] = mapped_column(BigIntId, ForeignKey("page.id", ondelete="CASCADE"), nullable=False, index=True)
    lemma_id: Mapped[int] = mapped_column(BigIntId, ForeignKey("lemma.id", ondelete="CASCADE"), nullable=False)
    rank: Mapped[float] = mapped_column(Float, nullable=False)

    page = relationship("Page", back_populates="index_entries")
    lemma = relationship("Lemma", back_populates="index_entries")
