"""
Cohorts Service

Regenerates the class schedule of one or all cohorts from their dates.

Error Handling:
- A single cohort failing (bad dates, no qualifying days, DB error) does not
  stop the bulk run; the failure is reported in that cohort's result
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from academy.modules.cohorts import repository
from academy.modules.cohorts.generator import (
    InvalidDateRangeError,
    SessionDate,
    generate_cohort_sessions,
)
from academy.modules.cohorts.models import Cohort
from academy.modules.shared import ServiceError

logger = logging.getLogger(__name__)


class CohortServiceError(ServiceError):
    """Base exception for cohort service errors."""


class CohortNotFoundError(CohortServiceError):
    """Raised when a cohort does not exist."""

    def __init__(self, cohort_id: UUID | str | None = None):
        message = f"Cohort {cohort_id} not found" if cohort_id else "Cohort not found"
        super().__init__(
            message=message,
            error_code="COHORT_NOT_FOUND",
            status_code=404,
        )


class InvalidCohortDatesError(CohortServiceError):
    """Raised when a cohort's dates cannot produce a schedule."""

    def __init__(self, reason: str):
        super().__init__(
            message=reason,
            error_code="INVALID_COHORT_DATES",
            status_code=400,
        )


class NoSessionDatesError(CohortServiceError):
    """Raised when a valid date range contains no class days."""

    def __init__(self):
        super().__init__(
            message="No valid session dates could be generated",
            error_code="NO_SESSION_DATES",
            status_code=400,
        )


@dataclass
class CohortGenerationResult:
    cohort_id: str
    cohort_name: str
    sessions_generated: int = 0
    error: str | None = None


@dataclass
class BulkGenerationSummary:
    total_cohorts: int = 0
    successful: int = 0
    failed: int = 0
    total_sessions_generated: int = 0
    results: list[CohortGenerationResult] = field(default_factory=list)


@dataclass(frozen=True)
class _CohortDates:
    """Plain copy of the cohort columns needed to rebuild its schedule."""

    cohort_id: str
    name: str
    start_date: date | None
    end_date: date | None

    @classmethod
    def of(cls, cohort: Cohort) -> "_CohortDates":
        return cls(
            cohort_id=str(cohort.id),
            name=cohort.name,
            start_date=cohort.start_date,
            end_date=cohort.end_date,
        )


async def _rebuild(db: AsyncSession, target: _CohortDates) -> list[SessionDate]:
    try:
        session_dates = generate_cohort_sessions(target.start_date, target.end_date)
    except InvalidDateRangeError as e:
        raise InvalidCohortDatesError(e.reason) from e

    if not session_dates:
        raise NoSessionDatesError()

    await repository.replace_sessions(db, target.cohort_id, session_dates)
    logger.info(
        f"Generated {len(session_dates)} sessions for cohort {target.cohort_id} ({target.name})"
    )
    return session_dates


async def regenerate_sessions(db: AsyncSession, cohort: Cohort) -> list[SessionDate]:
    """
    Rebuild a cohort's sessions from its start and end dates.

    Raises:
        InvalidCohortDatesError: Missing, unparseable, or reversed dates
        NoSessionDatesError: The range contains no class days
    """
    return await _rebuild(db, _CohortDates.of(cohort))


async def regenerate_sessions_for_cohort(db: AsyncSession, cohort_id: UUID) -> CohortGenerationResult:
    """
    Rebuild the sessions of a single cohort.

    Raises:
        CohortNotFoundError: Unknown cohort
        InvalidCohortDatesError, NoSessionDatesError: See regenerate_sessions
    """
    cohort = await repository.get_by_id(db, cohort_id)
    if cohort is None:
        raise CohortNotFoundError(cohort_id)

    target = _CohortDates.of(cohort)
    session_dates = await _rebuild(db, target)
    return CohortGenerationResult(
        cohort_id=target.cohort_id,
        cohort_name=target.name,
        sessions_generated=len(session_dates),
    )


async def regenerate_all_sessions(db: AsyncSession) -> BulkGenerationSummary:
    """
    Rebuild sessions for every cohort with both dates set.

    Cohort columns are copied up front; a failed cohort rolls the session
    back, which expires every loaded cohort.
    """
    targets = [_CohortDates.of(cohort) for cohort in await repository.list_dated_cohorts(db)]
    summary = BulkGenerationSummary(total_cohorts=len(targets))

    for target in targets:
        result = CohortGenerationResult(cohort_id=target.cohort_id, cohort_name=target.name)
        try:
            session_dates = await _rebuild(db, target)
            result.sessions_generated = len(session_dates)
        except CohortServiceError as e:
            result.error = e.message
        except Exception as e:
            logger.error(
                f"Error generating sessions for cohort {target.cohort_id}: {e}", exc_info=True
            )
            result.error = str(e) or "Unknown error"
        summary.results.append(result)

    summary.successful = sum(1 for r in summary.results if r.sessions_generated > 0)
    summary.failed = sum(1 for r in summary.results if r.error)
    summary.total_sessions_generated = sum(r.sessions_generated for r in summary.results)

    logger.info(
        f"Session generation completed. Cohorts: {summary.total_cohorts}, "
        f"Successful: {summary.successful}, Failed: {summary.failed}"
    )
    return summary


async def list_sessions(db: AsyncSession, cohort_id: UUID):
    """
    List a cohort's sessions.

    Raises:
        CohortNotFoundError: Unknown cohort
    """
    cohort = await repository.get_by_id(db, cohort_id)
    if cohort is None:
        raise CohortNotFoundError(cohort_id)
    return cohort, await repository.list_sessions(db, cohort_id)
