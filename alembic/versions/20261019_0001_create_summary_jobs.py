"""create summary_jobs table

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19 09:00:00
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "summary_jobs",
        sa.Column("id", sa.Uuid(as_uuid=True), nullable=False),
        sa.Column("status", sa.String(length=32), nullable=False),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("progress", sa.Integer(), server_default=sa.text("0"), nullable=False),
        sa.Column("input_row_count", sa.Integer(), nullable=True),
        sa.Column("valid_row_count", sa.Integer(), nullable=True),
        sa.Column("output_row_count", sa.Integer(), nullable=True),
        sa.Column("total_quantity", sa.BigInteger(), nullable=True),
        sa.Column(
            "output_reference",
            sa.String(length=512),
            nullable=True,
            comment="Artifact store path of the summary CSV",
        ),
        sa.Column("download_url", sa.Text(), nullable=True),
        sa.Column("error_message", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_summary_jobs_created_at", "summary_jobs", ["created_at"], unique=False)
    op.create_index("ix_summary_jobs_status", "summary_jobs", ["status"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_summary_jobs_status", table_name="summary_jobs")
    op.drop_index("ix_summary_jobs_created_at", table_name="summary_jobs")
    op.drop_table("summary_jobs")
