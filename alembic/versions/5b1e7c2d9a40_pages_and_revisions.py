"""pages and page_revisions

Revision ID: 5b1e7c2d9a40
Revises:
Create Date: 2026-10-19 10:12:41.118302

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '5b1e7c2d9a40'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

JSONType = sa.JSON().with_variant(postgresql.JSONB(astext_type=sa.Text()), "postgresql")


def upgrade():
    op.create_table(
        "pages",
        sa.Column("id", sa.String(length=64), primary_key=True),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("slug", sa.String(length=200), nullable=False),
        sa.Column("layout", sa.String(length=16), nullable=False, server_default="full"),
        sa.Column("sidebar_width", sa.Integer(), nullable=False, server_default="25"),
        sa.Column("sections", JSONType, nullable=False),
        sa.Column("content_shape", sa.String(length=16), nullable=True),
        sa.Column("sidebar_blocks", JSONType, nullable=True),
        sa.Column("show_in_nav", sa.Boolean(), nullable=True, server_default=sa.true()),
        sa.Column("nav_order", sa.Integer(), nullable=True, server_default="999"),
        sa.Column("nav_label", sa.String(length=200), nullable=True),
        sa.Column("is_archived", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint("slug", name="uq_pages_slug"),
    )
    op.create_index("ix_pages_archived_nav_order", "pages", ["is_archived", "nav_order"])

    op.create_table(
        "page_revisions",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("page_id", sa.String(length=64), sa.ForeignKey("pages.id", ondelete="CASCADE"), nullable=False),
        sa.Column("version_idx", sa.Integer(), nullable=False),
        sa.Column("snapshot", JSONType, nullable=False),
        sa.Column("label", sa.String(length=128), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint("page_id", "version_idx", name="uq_page_revisions_per_page"),
    )
    op.create_index("ix_page_revisions_page_id", "page_revisions", ["page_id"])
    op.create_index("ix_page_revisions_page_version", "page_revisions", ["page_id", "version_idx"])


def downgrade():
    op.drop_index("ix_page_revisions_page_version", table_name="page_revisions")
    op.drop_index("ix_page_revisions_page_id", table_name="page_revisions")
    op.drop_table("page_revisions")
    op.drop_index("ix_pages_archived_nav_order", table_name="pages")
    op.drop_table("pages")
