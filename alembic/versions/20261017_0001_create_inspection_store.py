"""create inspection store tables

Revision ID: 20261017_0001
Revises:
Create Date: 2026-10-17 09:00:00
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "20261017_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "establishments",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("license_number", sa.String(length=32), nullable=False),
        sa.Column("dba_name", sa.String(length=255), nullable=False),
        sa.Column("aka_name", sa.String(length=255), nullable=True),
        sa.Column("facility_type", sa.String(length=120), nullable=False),
        sa.Column("risk_level", sa.Integer(), nullable=True, comment="1=high risk, 2=medium, 3=low"),
        sa.Column("address", sa.String(length=255), nullable=False),
        sa.Column("city", sa.String(length=120), nullable=True),
        sa.Column("state", sa.String(length=8), nullable=True),
        sa.Column("zip", sa.String(length=16), nullable=True),
        sa.Column("latitude", sa.Float(), nullable=True),
        sa.Column("longitude", sa.Float(), nullable=True),
        sa.Column("score", sa.Integer(), nullable=True),
        sa.Column("latest_result", sa.String(length=64), nullable=True),
        sa.Column("latest_inspection_date", sa.Date(), nullable=True),
        sa.Column("total_inspections", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("pass_streak", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("summary_text", sa.Text(), nullable=True),
        sa.Column("summary_generated_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "summary_score_snapshot",
            sa.Integer(),
            nullable=True,
            comment="Score used when summary_text was generated",
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("license_number", name="uq_establishments_license_number"),
        sa.CheckConstraint("risk_level IN (1, 2, 3)", name="ck_establishments_risk_level"),
        sa.CheckConstraint("score BETWEEN 0 AND 100", name="ck_establishments_score"),
    )
    op.create_index("ix_establishments_score", "establishments", ["score"], unique=False)
    op.create_index(
        "ix_establishments_latest_inspection_date",
        "establishments",
        ["latest_inspection_date"],
        unique=False,
    )
    op.create_index("ix_establishments_zip", "establishments", ["zip"], unique=False)

    op.create_table(
        "inspections",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("establishment_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column(
            "inspection_id",
            sa.String(length=64),
            nullable=False,
            comment="Normalized external inspection identifier",
        ),
        sa.Column("inspection_date", sa.Date(), nullable=False),
        sa.Column("inspection_type", sa.String(length=120), nullable=False),
        sa.Column("results", sa.String(length=64), nullable=False),
        sa.Column("raw_violations", sa.Text(), nullable=True),
        sa.Column("violation_count", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("critical_count", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.ForeignKeyConstraint(["establishment_id"], ["establishments.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("inspection_id", name="uq_inspections_inspection_id"),
    )
    op.create_index("ix_inspections_establishment_id", "inspections", ["establishment_id"], unique=False)
    op.create_index("ix_inspections_inspection_date", "inspections", ["inspection_date"], unique=False)
    op.create_index("ix_inspections_results", "inspections", ["results"], unique=False)

    op.create_table(
        "violations",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("inspection_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("violation_code", sa.String(length=16), nullable=False),
        sa.Column("violation_description", sa.Text(), nullable=False),
        sa.Column("violation_comment", sa.Text(), nullable=True),
        sa.Column("is_critical", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.ForeignKeyConstraint(["inspection_id"], ["inspections.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("inspection_id", "violation_code", name="uq_violations_inspection_code"),
    )
    op.create_index("ix_violations_inspection_id", "violations", ["inspection_id"], unique=False)

    op.create_table(
        "sync_runs",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("mode", sa.String(length=16), nullable=False, comment="incremental, full"),
        sa.Column("status", sa.String(length=16), nullable=False),
        sa.Column("since_date", sa.Date(), nullable=True),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("records_fetched", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("establishments_processed", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("establishments_skipped", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("inspections_written", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("violations_written", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("geocode_hits", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("geocode_misses", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("errors", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_sync_runs_started_at", "sync_runs", ["started_at"], unique=False)
    op.create_index("ix_sync_runs_status", "sync_runs", ["status"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_sync_runs_status", table_name="sync_runs")
    op.drop_index("ix_sync_runs_started_at", table_name="sync_runs")
    op.drop_table("sync_runs")

    op.drop_index("ix_violations_inspection_id", table_name="violations")
    op.drop_table("violations")

    op.drop_index("ix_inspections_results", table_name="inspections")
    op.drop_index("ix_inspections_inspection_date", table_name="inspections")
    op.drop_index("ix_inspections_establishment_id", table_name="inspections")
    op.drop_table("inspections")

    op.drop_index("ix_establishments_zip", table_name="establishments")
    op.drop_index("ix_establishments_latest_inspection_date", table_name="establishments")
    op.drop_index("ix_establishments_score", table_name="establishments")
    op.drop_table("establishments")
