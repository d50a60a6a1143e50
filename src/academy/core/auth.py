"""
Authentication and Authorization Module

Provides authentication dependencies for FastAPI endpoints.
This module gates endpoints on a valid session cookie using the
session managers defined in session.py.

Every successful check re-issues the session cookie on the outgoing
response, which slides the idle timeout forward. Failures are reported
uniformly as 401 UNAUTHENTICATED regardless of the cause.
"""

import logging
from dataclasses import dataclass

from fastapi import Depends, HTTPException, Request, Response, status

from academy.core.session import (
    SessionManager,
    SessionPayload,
    get_admin_sessions,
    get_student_sessions,
)

logger = logging.getLogger(__name__)


@dataclass
class AuthenticatedAdmin:
    """
    Represents an authenticated admin.

    Populated from the session payload after cookie validation.

    Attributes:
        id: Admin's identifier
        email: Admin's normalized email address
        role: Admin's role label (optional)
        issued_at: Session login time (epoch ms)
        last_active: Refreshed activity time (epoch ms)
    """

    id: str
    email: str
    role: str | None
    issued_at: int
    last_active: int

    @classmethod
    def from_payload(cls, payload: SessionPayload) -> "AuthenticatedAdmin":
        return cls(
            id=payload.subject_id,
            email=payload.email,
            role=payload.role,
            issued_at=payload.issued_at,
            last_active=payload.last_active,
        )

    def __str__(self) -> str:
        return f"AuthenticatedAdmin(id={self.id}, email={self.email}, role={self.role})"


@dataclass
class AuthenticatedStudent:
    """Represents an authenticated student (profile)."""

    id: str
    email: str
    issued_at: int
    last_active: int

    @classmethod
    def from_payload(cls, payload: SessionPayload) -> "AuthenticatedStudent":
        return cls(
            id=payload.subject_id,
            email=payload.email,
            issued_at=payload.issued_at,
            last_active=payload.last_active,
        )


def _unauthenticated() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail={
            "error": "UNAUTHENTICATED",
            "message": "Authentication required.",
        },
    )


def _authenticate(
    sessions: SessionManager,
    request: Request,
    response: Response,
) -> SessionPayload | None:
    payload = sessions.require_auth(request)
    if payload is not None:
        sessions.issue_cookie(response, payload)
    return payload


async def get_current_admin(
    request: Request,
    response: Response,
    sessions: SessionManager = Depends(get_admin_sessions),
) -> AuthenticatedAdmin:
    """
    FastAPI dependency that validates the admin session cookie.

    Usage:
        @router.get("/admin/endpoint")
        async def admin_endpoint(
            admin: AuthenticatedAdmin = Depends(get_current_admin)
        ):
            # admin.id, admin.email, admin.role are available

    Raises:
        HTTPException 401: If the cookie is missing, invalid, or expired
    """
    payload = _authenticate(sessions, request, response)
    if payload is None:
        logger.debug(f"Rejected admin session for {request.url.path}")
        raise _unauthenticated()

    admin = AuthenticatedAdmin.from_payload(payload)
    logger.debug(f"Authenticated admin: {admin.id} ({admin.email})")
    return admin


async def get_current_student(
    request: Request,
    response: Response,
    sessions: SessionManager = Depends(get_student_sessions),
) -> AuthenticatedStudent:
    """
    FastAPI dependency that validates the student session cookie.

    Raises:
        HTTPException 401: If the cookie is missing, invalid, or expired
    """
    payload = _authenticate(sessions, request, response)
    if payload is None:
        raise _unauthenticated()
    return AuthenticatedStudent.from_payload(payload)


async def get_optional_student(
    request: Request,
    response: Response,
    sessions: SessionManager = Depends(get_student_sessions),
) -> AuthenticatedStudent | None:
    """
    Optional student authentication dependency.

    Returns the student if a valid session cookie is present, or None.
    """
    payload = _authenticate(sessions, request, response)
    if payload is None:
        return None
    return AuthenticatedStudent.from_payload(payload)


__all__ = [
    "AuthenticatedAdmin",
    "AuthenticatedStudent",
    "get_current_admin",
    "get_current_student",
    "get_optional_student",
]
