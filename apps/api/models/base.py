"""SQLAlchemy declarative base for site, page, lemma and search_index."""
from sqlalchemy import BigInteger, Integer
from sqlalchemy.orm import DeclarativeBase

# SQLite only autoincrements an INTEGER PRIMARY KEY.
BigIntId = BigInteger().with_variant(Integer, "sqlite")


class Base(DeclarativeBase):
    """Base class for all models; Base.metadata feeds ensure_tables and Alembic."""
