"""lemma model. frequency = number of distinct pages of the site containing the lemma."""

from sqlalchemy import ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from apps.api.models.base import Base, BigIntId


class Lemma(Base):
    __tablename__ = "lemma"
    __table_args__ = (UniqueConstraint("site_id", "lemma", name="uq_lemma_site_lemma"),)

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    site_id: Mapped[int] = mapped_column(BigIntId, ForeignKey("site.id", ondelete="CASCADE"), nullable=False, index=True)
    lemma: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    frequency: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    site = relationship("Site", back_populates="lemmas")
    index_entries = relationship("IndexEntry", back_populates="lemma", cascade="all, delete-orphan", passive_deletes=True)
