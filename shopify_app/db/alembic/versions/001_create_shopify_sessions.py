"""Create shopify_sessions table.

Revision ID: 001
Revises:
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "shopify_sessions",
        sa.Column("id", sa.String(255), primary_key=True),
        sa.Column("shop", sa.String(255), nullable=False),
        sa.Column("state", sa.String(255), nullable=False),
        sa.Column("is_online", sa.Boolean, nullable=False),
        sa.Column("scope", sa.Text),
        sa.Column("expires", sa.DateTime),
        sa.Column("access_token", sa.Text),
        sa.Column("user_id", sa.BigInteger),
        sa.Column("online_access_info", sa.JSON),
        sa.Column("extra", sa.JSON),
        sa.Column("updated_at", sa.DateTime),
    )

    # Lookups by shop (find_sessions_by_shop, uninstall cleanup) and by user
    op.create_index("ix_shopify_sessions_shop", "shopify_sessions", ["shop"])
    op.create_index("ix_shopify_sessions_user_id", "shopify_sessions", ["user_id"])


def downgrade() -> None:
    op.drop_index("ix_shopify_sessions_user_id", "shopify_sessions")
    op.drop_index("ix_shopify_sessions_shop", "shopify_sessions")
    op.drop_table("shopify_sessions")
