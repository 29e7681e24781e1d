"""Base schema: site, page, lemma, search_index.

Uniqueness: page (site_id, path), lemma (site_id, lemma). All child rows cascade on delete.
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "000_base"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

BIGINT_ID = sa.BigInteger().with_variant(sa.Integer(), "sqlite")
SITE_STATUS = sa.Enum("INDEXING", "INDEXED", "FAILED", name="site_status")


def upgrade() -> None:
    # 1) site (page and lemma depend on it)
    op.create_table(
        "site",
        sa.Column("id", BIGINT_ID, primary_key=True, autoincrement=True),
        sa.Column("status", SITE_STATUS, nullable=False),
        sa.Column("status_time", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("last_error", sa.Text(), nullable=True),
        sa.Column("url", sa.String(255), nullable=False, unique=True),
        sa.Column("name", sa.String(255), nullable=True),
    )

    # 2) page
    op.create_table(
        "page",
        sa.Column("id", BIGINT_ID, primary_key=True, autoincrement=True),
        sa.Column("site_id", BIGINT_ID, sa.ForeignKey("site.id", ondelete="CASCADE"), nullable=False),
        sa.Column("path", sa.String(768), nullable=False),
        sa.Column("code", sa.Integer(), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.UniqueConstraint("site_id", "path", name="uq_page_site_path"),
    )
    op.create_index("ix_page_site_id", "page", ["site_id"], unique=False, if_not_exists=True)

    # 3) lemma
    op.create_table(
        "lemma",
        sa.Column("id", BIGINT_ID, primary_key=True, autoincrement=True),
        sa.Column("site_id", BIGINT_ID, sa.ForeignKey("site.id", ondelete="CASCADE"), nullable=False),
        sa.Column("lemma", sa.String(255), nullable=False),
        sa.Column("frequency", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.UniqueConstraint("site_id", "lemma", name="uq_lemma_site_lemma"),
    )
    op.create_index("ix_lemma_site_id", "lemma", ["site_id"], unique=False, if_not_exists=True)
    op.create_index("ix_lemma_lemma", "lemma", ["lemma"], unique=False, if_not_exists=True)

    # 4) search_index ("index" is reserved in SQL)
    op.create_table(
        "search_index",
        sa.Column("id", BIGINT_ID, primary_key=True, autoincrement=True),
        sa.Column("page_id", BIGINT_ID, sa.ForeignKey("page.id", ondelete="CASCADE"), nullable=False),
        sa.Column("lemma_id", BIGINT_ID, sa.ForeignKey("lemma.id", ondelete="CASCADE"), nullable=False),
        sa.Column("rank", sa.Float(), nullable=False),
    )
    op.create_index("ix_search_index_page_id", "search_index", ["page_id"], unique=False, if_not_exists=True)
    op.create_index("ix_search_index_lemma_page", "search_index", ["lemma_id", "page_id"], unique=False, if_not_exists=True)


def downgrade() -> None:
    op.drop_table("search_index")
    op.drop_table("lemma")
    op.drop_table("page")
    op.drop_table("site")
    SITE_STATUS.drop(op.get_bind(), checkfirst=True)
