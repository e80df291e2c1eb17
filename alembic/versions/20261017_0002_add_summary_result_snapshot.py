"""add summary_result_snapshot to establishments

Revision ID: 20261017_0002
Revises: 20261017_0001
Create Date: 2026-10-17 09:30:00

Cached summaries generated before this revision have no result snapshot
and are regenerated on their next read.
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "20261017_0002"
down_revision = "20261017_0001"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.add_column(
        "establishments",
        sa.Column(
            "summary_result_snapshot",
            sa.String(length=64),
            nullable=True,
            comment="latest_result used when summary_text was generated",
        ),
    )


def downgrade() -> None:
    op.drop_column("establishments", "summary_result_snapshot")
