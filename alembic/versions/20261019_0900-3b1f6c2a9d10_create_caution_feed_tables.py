"""Create feed source and caution item tables

Revision ID: 3b1f6c2a9d10
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""

from typing import Sequence, Union

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "3b1f6c2a9d10"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

CATEGORIES = (
    "data-breach",
    "phishing",
    "social-media",
    "identity-theft",
    "online-safety",
    "financial-fraud",
    "privacy-laws",
    "device-security",
    "scams",
    "parental-controls",
    "general-security",
)
SEVERITIES = ("critical", "high", "medium", "low")


def upgrade() -> None:
    # Enum types are shared across tables, so create them once up front
    caution_category = postgresql.ENUM(*CATEGORIES, name="caution_category", create_type=False)
    caution_severity = postgresql.ENUM(*SEVERITIES, name="caution_severity", create_type=False)
    caution_category.create(op.get_bind(), checkfirst=True)
    caution_severity.create(op.get_bind(), checkfirst=True)

    # Create feed_sources table
    op.create_table(
        "feed_sources",
        sa.Column("id", sa.UUID(), nullable=False),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
        ),
        sa.Column(
            "updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
        ),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("url", sa.String(length=2048), nullable=False),
        sa.Column("category", caution_category, nullable=False),
        sa.Column("personas", sa.JSON(), nullable=False),
        sa.Column("poll_interval_ms", sa.Integer(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("last_fetched_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("source_label", sa.String(length=200), nullable=False),
        sa.CheckConstraint(
            "poll_interval_ms >= 300000", name=op.f("ck_feed_sources_poll_interval_floor")
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_feed_sources")),
    )
    op.create_index(op.f("ix_feed_sources_id"), "feed_sources", ["id"], unique=False)
    op.create_index(op.f("ix_feed_sources_url"), "feed_sources", ["url"], unique=True)
    op.create_index(op.f("ix_feed_sources_category"), "feed_sources", ["category"], unique=False)

    # Create caution_items table
    op.create_table(
        "caution_items",
        sa.Column("id", sa.UUID(), nullable=False),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
        ),
        sa.Column(
            "updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
        ),
        sa.Column("source_id", sa.UUID(), nullable=False),
        sa.Column("title", sa.String(length=500), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("content", sa.Text(), nullable=True),
        sa.Column("category", caution_category, nullable=False),
        sa.Column("severity", caution_severity, nullable=False),
        sa.Column("published_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("link", sa.String(length=2048), nullable=False),
        sa.Column("source_name", sa.String(length=200), nullable=False),
        sa.Column("source_url", sa.String(length=2048), nullable=False),
        sa.Column("tags", sa.JSON(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("view_count", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(
            ["source_id"],
            ["feed_sources.id"],
            name=op.f("fk_caution_items_source_id_feed_sources"),
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_caution_items")),
        sa.UniqueConstraint("source_id", "link", name="uq_caution_items_source_link"),
    )
    op.create_index(op.f("ix_caution_items_id"), "caution_items", ["id"], unique=False)
    op.create_index(
        op.f("ix_caution_items_source_id"), "caution_items", ["source_id"], unique=False
    )
    op.create_index(op.f("ix_caution_items_severity"), "caution_items", ["severity"], unique=False)
    op.create_index(
        op.f("ix_caution_items_published_date"), "caution_items", ["published_date"], unique=False
    )
    op.create_index(
        "ix_caution_items_published_id", "caution_items", ["published_date", "id"], unique=False
    )
    op.create_index(
        "ix_caution_items_category_active", "caution_items", ["category", "is_active"], unique=False
    )

    # Create caution_item_personas table
    op.create_table(
        "caution_item_personas",
        sa.Column("caution_item_id", sa.UUID(), nullable=False),
        sa.Column("persona", sa.String(length=50), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(
            ["caution_item_id"],
            ["caution_items.id"],
            name=op.f("fk_caution_item_personas_caution_item_id_caution_items"),
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint(
            "caution_item_id", "persona", name=op.f("pk_caution_item_personas")
        ),
    )
    op.create_index(
        op.f("ix_caution_item_personas_persona"),
        "caution_item_personas",
        ["persona"],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index(op.f("ix_caution_item_personas_persona"), table_name="caution_item_personas")
    op.drop_table("caution_item_personas")

    op.drop_index("ix_caution_items_category_active", table_name="caution_items")
    op.drop_index("ix_caution_items_published_id", table_name="caution_items")
    op.drop_index(op.f("ix_caution_items_published_date"), table_name="caution_items")
    op.drop_index(op.f("ix_caution_items_severity"), table_name="caution_items")
    op.drop_index(op.f("ix_caution_items_source_id"), table_name="caution_items")
    op.drop_index(op.f("ix_caution_items_id"), table_name="caution_items")
    op.drop_table("caution_items")

    op.drop_index(op.f("ix_feed_sources_category"), table_name="feed_sources")
    op.drop_index(op.f("ix_feed_sources_url"), table_name="feed_sources")
    op.drop_index(op.f("ix_feed_sources_id"), table_name="feed_sources")
    op.drop_table("feed_sources")

    postgresql.ENUM(name="caution_severity").drop(op.get_bind(), checkfirst=True)
    postgresql.ENUM(name="caution_category").drop(op.get_bind(), checkfirst=True)
