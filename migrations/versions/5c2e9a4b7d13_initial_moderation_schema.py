"""initial moderation schema

Revision ID: 5c2e9a4b7d13
Revises:
Create Date: 2026-10-19 09:12:41.503817

"""
from __future__ import annotations

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "5c2e9a4b7d13"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create content, report and vote tables."""
    op.create_table(
        "content_item",
        sa.Column("id", sa.String(length=64), nullable=False),
        sa.Column("content_type", sa.String(length=16), nullable=False),
        sa.Column("author_id", sa.String(length=128), nullable=False),
        sa.Column("sphere_id", sa.String(length=64), nullable=True),
        sa.Column("body", sa.Text(), nullable=False),
        sa.Column("media_refs", sa.JSON(), nullable=False),
        sa.Column("moderation_status", sa.String(length=16), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_content_item_author_id", "content_item", ["author_id"])
    op.create_index("ix_content_item_sphere_id", "content_item", ["sphere_id"])

    op.create_table(
        "report",
        sa.Column("id", sa.String(length=32), nullable=False),
        sa.Column("content_id", sa.String(length=64), nullable=False),
        sa.Column("content_type", sa.String(length=16), nullable=False),
        sa.Column("sphere_id", sa.String(length=64), nullable=True),
        sa.Column("reporter_id", sa.String(length=128), nullable=False),
        sa.Column("reason", sa.String(length=32), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("status", sa.String(length=32), nullable=False),
        sa.Column("resolution_cause", sa.String(length=32), nullable=True),
        sa.Column("ai_confidence", sa.Float(), nullable=True),
        sa.Column("ai_flags", sa.JSON(), nullable=False),
        sa.Column("moderator_notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("resolved_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_report_content_id", "report", ["content_id"])
    op.create_index("ix_report_sphere_id", "report", ["sphere_id"])
    op.create_index("ix_report_reporter_id", "report", ["reporter_id"])
    op.create_index("ix_report_status", "report", ["status"])

    op.create_table(
        "report_vote",
        sa.Column("report_id", sa.String(length=32), nullable=False),
        sa.Column("voter_id", sa.String(length=128), nullable=False),
        sa.Column("decision", sa.String(length=8), nullable=False),
        sa.Column("cast_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["report_id"], ["report.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("report_id", "voter_id"),
    )


def downgrade() -> None:
    """Drop the moderation tables."""
    op.drop_table("report_vote")
    op.drop_index("ix_report_status", table_name="report")
    op.drop_index("ix_report_reporter_id", table_name="report")
    op.drop_index("ix_report_sphere_id", table_name="report")
    op.drop_index("ix_report_content_id", table_name="report")
    op.drop_table("report")
    op.drop_index("ix_content_item_sphere_id", table_name="content_item")
    op.drop_index("ix_content_item_author_id", table_name="content_item")
    op.drop_table("content_item")
