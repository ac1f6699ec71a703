"""Initial schema

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-19

"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "0001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "applications",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("university_name", sa.String(length=255), nullable=False),
        sa.Column("program_name", sa.String(length=255), nullable=False),
        sa.Column("country", sa.String(length=50), nullable=False),
        sa.Column("deadline", sa.Date(), nullable=False),
        sa.Column("status", sa.String(length=50), nullable=False, server_default="Not Started"),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_applications_country", "applications", ["country"])
    op.create_index("ix_applications_deadline", "applications", ["deadline"])
    op.create_index("ix_applications_status", "applications", ["status"])

    op.create_table(
        "documents",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "application_id",
            sa.Integer(),
            sa.ForeignKey("applications.id", ondelete="CASCADE"),
            nullable=False,
            unique=True,
        ),
        sa.Column("gre", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("toefl_ielts", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("lors", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("sop", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("transcript", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
    )

    op.create_table(
        "preparation",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("type", sa.String(length=20), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("target_date", sa.Date(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("completed", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
    )
    op.create_index("ix_preparation_type", "preparation", ["type"])

    op.create_table(
        "research",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("university_name", sa.String(length=255), nullable=False),
        sa.Column("program_name", sa.String(length=255), nullable=False),
        sa.Column("country", sa.String(length=50), nullable=False),
        sa.Column("website", sa.String(length=500), nullable=True),
        sa.Column("ranking", sa.Integer(), nullable=True),
        sa.Column("tuition_fees", sa.String(length=255), nullable=True),
        sa.Column("requirements", sa.Text(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("status", sa.String(length=30), nullable=False, server_default="Researching"),
        *_timestamps(),
    )
    op.create_index("ix_research_country", "research", ["country"])
    op.create_index("ix_research_status", "research", ["status"])

    op.create_table(
        "chat_history",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("session_id", sa.String(length=120), nullable=False, server_default="default"),
        sa.Column("role", sa.String(length=20), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_chat_history_session_id", "chat_history", ["session_id"])


def downgrade() -> None:
    op.drop_index("ix_chat_history_session_id", table_name="chat_history")
    op.drop_table("chat_history")
    op.drop_index("ix_research_status", table_name="research")
    op.drop_index("ix_research_country", table_name="research")
    op.drop_table("research")
    op.drop_index("ix_preparation_type", table_name="preparation")
    op.drop_table("preparation")
    op.drop_table("documents")
    op.drop_index("ix_applications_status", table_name="applications")
    op.drop_index("ix_applications_deadline", table_name="applications")
    op.drop_index("ix_applications_country", table_name="applications")
    op.drop_table("applications")
