"""create academy tables

Revision ID: b7c1d2e3f4a5
Revises:
Create Date: 2026-10-17 09:00:00.000000

This migration:
1. Creates the admins table (back-office accounts and password reset tokens)
2. Creates the profiles table with the profile_status enum
3. Creates the cohorts and cohort_sessions tables with the cohort_session_status enum

cohort_sessions rows are removed with their cohort (ON DELETE CASCADE) and
session numbers are unique per cohort.
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "b7c1d2e3f4a5"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    """Create admins, profiles, cohorts and cohort_sessions."""
    profile_status_enum = postgresql.ENUM(
        "pending",
        "approved",
        "rejected",
        name="profile_status",
        create_type=False,
    )
    profile_status_enum.create(op.get_bind(), checkfirst=True)

    cohort_session_status_enum = postgresql.ENUM(
        "scheduled",
        "completed",
        "cancelled",
        name="cohort_session_status",
        create_type=False,
    )
    cohort_session_status_enum.create(op.get_bind(), checkfirst=True)

    op.create_table(
        "admins",
        sa.Column("id", postgresql.UUID(as_uuid=False), nullable=False),
        *_timestamps(),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("password_hash", sa.Text(), nullable=False),
        sa.Column("role", sa.String(length=50), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default="true"),
        # Password reset (SHA-256 hex of the emailed token)
        sa.Column("password_reset_token", sa.String(length=64), nullable=True),
        sa.Column("password_reset_token_expiry", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_login_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_admins_email"), "admins", ["email"], unique=True)
    op.create_index(
        op.f("ix_admins_password_reset_token"),
        "admins",
        ["password_reset_token"],
        unique=False,
    )

    op.create_table(
        "profiles",
        sa.Column("id", postgresql.UUID(as_uuid=False), nullable=False),
        *_timestamps(),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("password_hash", sa.Text(), nullable=True),
        sa.Column(
            "status",
            profile_status_enum,
            nullable=False,
            server_default="pending",
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_profiles_email"), "profiles", ["email"], unique=True)

    op.create_table(
        "cohorts",
        sa.Column("id", postgresql.UUID(as_uuid=False), nullable=False),
        *_timestamps(),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=True),
        sa.Column("end_date", sa.Date(), nullable=True),
        sa.Column("sessions", sa.Integer(), nullable=False, server_default="0"),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "cohort_sessions",
        sa.Column("id", postgresql.UUID(as_uuid=False), nullable=False),
        *_timestamps(),
        sa.Column("cohort_id", postgresql.UUID(as_uuid=False), nullable=False),
        sa.Column("session_date", sa.Date(), nullable=False),
        sa.Column("session_number", sa.Integer(), nullable=False),
        sa.Column(
            "status",
            cohort_session_status_enum,
            nullable=False,
            server_default="scheduled",
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(
            ["cohort_id"],
            ["cohorts.id"],
            name="fk_cohort_sessions_cohort_id",
            ondelete="CASCADE",
        ),
        sa.UniqueConstraint("cohort_id", "session_number", name="uq_cohort_sessions_number"),
    )
    op.create_index(
        op.f("ix_cohort_sessions_cohort_id"),
        "cohort_sessions",
        ["cohort_id"],
        unique=False,
    )


def downgrade() -> None:
    """Drop all academy tables and enum types."""
    op.drop_index(op.f("ix_cohort_sessions_cohort_id"), table_name="cohort_sessions")
    op.drop_table("cohort_sessions")
    op.drop_table("cohorts")

    op.drop_index(op.f("ix_profiles_email"), table_name="profiles")
    op.drop_table("profiles")

    op.drop_index(op.f("ix_admins_password_reset_token"), table_name="admins")
    op.drop_index(op.f("ix_admins_email"), table_name="admins")
    op.drop_table("admins")

    postgresql.ENUM(name="cohort_session_status").drop(op.get_bind(), checkfirst=True)
    postgresql.ENUM(name="profile_status").drop(op.get_bind(), checkfirst=True)
