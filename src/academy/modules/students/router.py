"""
Student Authentication Router

Endpoints:
- POST /profile/login - Log in and receive the student session cookie
- POST /profile/logout - Clear the student session cookie
- GET /profile/verify-session - Report whether the session is valid (always 200)
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.ext.asyncio import AsyncSession

from academy.core.auth import AuthenticatedStudent, get_optional_student
from academy.core.database import get_db
from academy.core.session import SessionManager, get_student_sessions
from academy.modules.shared import ServiceError
from academy.modules.students import service
from academy.modules.students.schemas import (
    ProfileResponse,
    StudentLoginRequest,
    StudentLoginResponse,
    VerifySessionResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/login", response_model=StudentLoginResponse)
async def login(
    credentials: StudentLoginRequest,
    response: Response,
    db: AsyncSession = Depends(get_db),
    sessions: SessionManager = Depends(get_student_sessions),
) -> StudentLoginResponse:
    """
    Authenticate a student and set the session cookie.

    Raises:
        HTTPException 401: Invalid credentials
        HTTPException 403: Profile not approved
    """
    try:
        profile = await service.authenticate_student(db, credentials.email, credentials.password)
    except ServiceError as e:
        raise HTTPException(
            status_code=e.status_code,
            detail={"error": e.error_code, "message": e.message},
        ) from e

    sessions.issue_cookie(response, sessions.new_payload(profile.id, profile.email))
    return StudentLoginResponse(profile=ProfileResponse.model_validate(profile))


@router.post("/logout")
async def logout(
    response: Response,
    sessions: SessionManager = Depends(get_student_sessions),
) -> dict[str, bool]:
    """Clear the student session cookie."""
    sessions.clear_cookie(response)
    return {"success": True}


@router.get("/verify-session", response_model=VerifySessionResponse)
async def verify_session(
    response: Response,
    student: AuthenticatedStudent | None = Depends(get_optional_student),
    db: AsyncSession = Depends(get_db),
    sessions: SessionManager = Depends(get_student_sessions),
) -> VerifySessionResponse:
    """
    Check the student session cookie and return the profile.

    A valid session is refreshed by the dependency; a session whose profile
    no longer exists is cleared.
    """
    if student is None:
        return VerifySessionResponse(valid=False)

    profile = await service.get_profile(db, student.id)
    if profile is None:
        logger.warning(f"Valid session for missing profile {student.id}")
        sessions.clear_cookie(response)
        return VerifySessionResponse(valid=False)

    return VerifySessionResponse(valid=True, profile=ProfileResponse.model_validate(profile))
