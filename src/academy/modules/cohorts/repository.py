"""
Cohorts Repository

Database operations for cohorts and their class sessions.
Only database access lives here; date generation is in generator.py.
"""

from collections.abc import Sequence
from uuid import UUID

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from .generator import SessionDate
from .models import Cohort, CohortSession, CohortSessionStatus


async def get_by_id(db: AsyncSession, cohort_id: UUID | str) -> Cohort | None:
    """Get cohort by ID."""
    return await db.get(Cohort, str(cohort_id))


async def list_dated_cohorts(db: AsyncSession) -> Sequence[Cohort]:
    """Get all cohorts that have both a start and an end date."""
    result = await db.execute(
        select(Cohort)
        .where(Cohort.start_date.is_not(None), Cohort.end_date.is_not(None))
        .order_by(Cohort.start_date)
    )
    return result.scalars().all()


async def list_sessions(db: AsyncSession, cohort_id: UUID | str) -> Sequence[CohortSession]:
    """Get a cohort's sessions ordered by session number."""
    result = await db.execute(
        select(CohortSession)
        .where(CohortSession.cohort_id == str(cohort_id))
        .order_by(CohortSession.session_number)
    )
    return result.scalars().all()


async def replace_sessions(
    db: AsyncSession,
    cohort_id: UUID | str,
    session_dates: Sequence[SessionDate],
) -> None:
    """
    Replace all sessions of a cohort in a single transaction.

    Existing sessions are deleted, the new ones inserted as scheduled,
    and the cohort's session count updated.

    Takes the cohort id rather than an instance: a rollback expires every
    loaded instance, and reading one afterwards would trigger a lazy load.
    """
    cohort_id = str(cohort_id)
    try:
        await db.execute(
            delete(CohortSession)
            .where(CohortSession.cohort_id == cohort_id)
            .execution_options(synchronize_session=False)
        )
        db.add_all(
            [
                CohortSession(
                    cohort_id=cohort_id,
                    session_date=session.date,
                    session_number=session.session_number,
                    status=CohortSessionStatus.SCHEDULED,
                )
                for session in session_dates
            ]
        )
        await db.execute(
            update(Cohort)
            .where(Cohort.id == cohort_id)
            .values(sessions=len(session_dates))
            .execution_options(synchronize_session=False)
        )
        await db.commit()
    except Exception:
        await db.rollback()
        raise
