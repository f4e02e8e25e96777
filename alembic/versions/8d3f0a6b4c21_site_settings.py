"""site_settings

Revision ID: 8d3f0a6b4c21
Revises: 5b1e7c2d9a40
Create Date: 2026-10-19 16:40:07.552913

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '8d3f0a6b4c21'
down_revision: Union[str, Sequence[str], None] = '5b1e7c2d9a40'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade():
    op.create_table(
        "site_settings",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=False),
        sa.Column("band_name", sa.String(length=200), nullable=False, server_default="Westwood Community Band"),
        sa.Column("logo_url", sa.String(length=500), nullable=False, server_default=""),
        sa.Column("primary_color", sa.String(length=32), nullable=False, server_default="#1e3a8a"),
        sa.Column("secondary_color", sa.String(length=32), nullable=False, server_default="#dc2626"),
        sa.Column("footer_text", sa.Text(), nullable=False, server_default=""),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )


def downgrade():
    op.drop_table("site_settings")
