"""
Cohort Models

Cohorts and their scheduled class sessions.
"""

from datetime import date
from enum import Enum

from sqlalchemy import Date, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.dialects.postgresql import ENUM, UUID
from sqlalchemy.orm import Mapped, mapped_column

from academy.modules.shared import BaseModel


class CohortSessionStatus(str, Enum):
    """Status of a single class session."""

    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Cohort(BaseModel):
    """
    A group of students taking the curriculum together.

    ``sessions`` caches the number of generated class sessions.
    """

    __tablename__ = "cohorts"

    name: Mapped[str] = mapped_column(
        String(200),
        nullable=False,
    )
    start_date: Mapped[date | None] = mapped_column(
        Date,
        nullable=True,
    )
    end_date: Mapped[date | None] = mapped_column(
        Date,
        nullable=True,
    )
    sessions: Mapped[int] = mapped_column(
        Integer,
        default=0,
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<Cohort(id={self.id}, name={self.name})>"


class CohortSession(BaseModel):
    """One scheduled class meeting of a cohort."""

    __tablename__ = "cohort_sessions"
    __table_args__ = (
        UniqueConstraint("cohort_id", "session_number", name="uq_cohort_sessions_number"),
    )

    # ON DELETE CASCADE: sessions go away with their cohort
    cohort_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("cohorts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    session_date: Mapped[date] = mapped_column(
        Date,
        nullable=False,
    )
    session_number: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )
    status: Mapped[CohortSessionStatus] = mapped_column(
        ENUM(
            CohortSessionStatus,
            name="cohort_session_status",
            create_type=True,
            values_callable=lambda enum: [member.value for member in enum],
        ),
        nullable=False,
        default=CohortSessionStatus.SCHEDULED,
    )

    def __repr__(self) -> str:
        return (
            f"<CohortSession(cohort_id={self.cohort_id}, "
            f"number={self.session_number}, date={self.session_date})>"
        )
