"""page model. Path is unique within its site."""

from sqlalchemy import ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from apps.api.models.base import Base, BigIntId


class Page(Base):
    __tablename__ = "page"
    __table_args__ = (UniqueConstraint("site_id", "path", name="uq_page_site_path"),)

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    site_id: Mapped[int] = mapped_column(BigIntId, ForeignKey("site.id", ondelete="CASCADE"), nullable=False, index=True)
    path: Mapped[str] = mapped_column(String(768), nullable=False)
    code: Mapped[int] = mapped_column(Integer, nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False, default="")

    site = relationship("Site", back_populates="pages")
    index_entries = relationship("IndexEntry", back_populates="page", cascade="all, delete-orphan", passive_deletes=True)
