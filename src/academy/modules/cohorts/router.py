"""
Cohorts Routers

API endpoints for cohort session scheduling. All endpoints require an
admin session.

Endpoints:
- POST /admin/cohorts/{id}/generate-sessions - Rebuild one cohort's sessions
- GET /admin/cohorts/{id}/sessions - List one cohort's sessions
- POST /cohorts/generate-all-sessions - Rebuild sessions of every dated cohort
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from academy.core.auth import AuthenticatedAdmin, get_current_admin
from academy.core.database import get_db
from academy.modules.cohorts import service
from academy.modules.cohorts.schemas import (
    CohortGenerationResultSchema,
    CohortSessionItem,
    CohortSessionsResponse,
    GenerateAllSessionsResponse,
    GenerateSessionsResponse,
)
from academy.modules.cohorts.service import CohortServiceError

logger = logging.getLogger(__name__)

admin_router = APIRouter()
router = APIRouter()


def _handle_service_error(e: CohortServiceError) -> None:
    """Convert service errors to HTTPExceptions."""
    raise HTTPException(
        status_code=e.status_code,
        detail={
            "error": e.error_code,
            "message": e.message,
        },
    )


@admin_router.post("/{cohort_id}/generate-sessions", response_model=GenerateSessionsResponse)
async def generate_sessions(
    cohort_id: UUID,
    admin: AuthenticatedAdmin = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
) -> GenerateSessionsResponse:
    """
    Rebuild a cohort's class sessions from its start and end dates.

    Raises:
        HTTPException 404: Cohort not found
        HTTPException 400: Invalid dates or no class days in range
    """
    logger.info(f"Admin {admin.id} regenerating sessions for cohort {cohort_id}")
    try:
        result = await service.regenerate_sessions_for_cohort(db, cohort_id)
    except CohortServiceError as e:
        _handle_service_error(e)

    return GenerateSessionsResponse(result=CohortGenerationResultSchema.model_validate(result))


@admin_router.get("/{cohort_id}/sessions", response_model=CohortSessionsResponse)
async def list_sessions(
    cohort_id: UUID,
    admin: AuthenticatedAdmin = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
) -> CohortSessionsResponse:
    """List a cohort's sessions in session-number order."""
    try:
        cohort, sessions = await service.list_sessions(db, cohort_id)
    except CohortServiceError as e:
        _handle_service_error(e)

    return CohortSessionsResponse(
        cohort_id=str(cohort.id),
        cohort_name=cohort.name,
        start_date=cohort.start_date,
        end_date=cohort.end_date,
        total=len(sessions),
        sessions=[CohortSessionItem.model_validate(s) for s in sessions],
    )


@router.post("/generate-all-sessions", response_model=GenerateAllSessionsResponse)
async def generate_all_sessions(
    admin: AuthenticatedAdmin = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
) -> GenerateAllSessionsResponse:
    """Rebuild sessions for every cohort that has both dates set."""
    logger.info(f"Admin {admin.id} regenerating sessions for all cohorts")
    summary = await service.regenerate_all_sessions(db)

    return GenerateAllSessionsResponse(
        total_cohorts=summary.total_cohorts,
        successful=summary.successful,
        failed=summary.failed,
        total_sessions_generated=summary.total_sessions_generated,
        results=[CohortGenerationResultSchema.model_validate(r) for r in summary.results],
    )
