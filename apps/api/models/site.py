"""site model. One row per configured root URL; owns pages and lemmas."""

import enum
from datetime import datetime

from sqlalchemy import DateTime, Enum, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from apps.api.models.base import Base, BigIntId


class SiteStatus(str, enum.Enum):
    INDEXING = "INDEXING"
    INDEXED = "INDEXED"
    FAILED = "FAILED"


class Site(Base):
    __tablename__ = "site"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    status: Mapped[SiteStatus] = mapped_column(Enum(SiteStatus, name="site_status"), nullable=False)
    status_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    last_error: Mapped[str | None] = mapped_column(Text, nullable=True)
    url: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)

    pages = relationship("Page", back_populates="site", cascade="all, delete-orphan", passive_deletes=True)
    lemmas = relationship("Lemma", back_populates="site", cascade="all, delete-orphan", passive_deletes=True)
