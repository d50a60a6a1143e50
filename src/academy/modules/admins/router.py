"""
Admin Authentication Router

Endpoints:
- POST /admin/login - Log in and receive the admin session cookie
- POST /admin/logout - Clear the admin session cookie
- GET /admin/me - Current admin session (refreshes the cookie)
- POST /admin/password-reset/request - Email a reset link
- POST /admin/password-reset/reset - Set a new password using a reset token
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from academy.core.auth import AuthenticatedAdmin, get_current_admin
from academy.core.database import get_db
from academy.core.session import SessionManager, get_admin_sessions
from academy.modules.admins import service
from academy.modules.admins.schemas import (
    AdminLoginRequest,
    AdminLoginResponse,
    AdminMeResponse,
    AdminSessionInfo,
    MessageResponse,
    PasswordResetConfirm,
    PasswordResetRequest,
)
from academy.modules.shared import ServiceError

logger = logging.getLogger(__name__)

router = APIRouter()


def _handle_service_error(e: ServiceError) -> None:
    """Convert service errors to HTTPExceptions."""
    raise HTTPException(
        status_code=e.status_code,
        detail={
            "error": e.error_code,
            "message": e.message,
        },
    )


@router.post("/login", response_model=AdminLoginResponse)
async def login(
    credentials: AdminLoginRequest,
    request: Request,
    response: Response,
    db: AsyncSession = Depends(get_db),
    sessions: SessionManager = Depends(get_admin_sessions),
) -> AdminLoginResponse:
    """
    Authenticate an admin and set the session cookie.

    An already-authenticated admin gets their existing session refreshed
    instead of a new one.

    Raises:
        HTTPException 401: Invalid credentials
        HTTPException 403: Account inactive
    """
    existing = sessions.require_auth(request)
    if existing is not None:
        sessions.issue_cookie(response, existing)
        return AdminLoginResponse(admin=AdminSessionInfo.from_payload(existing))

    try:
        admin = await service.authenticate_admin(db, credentials.email, credentials.password)
    except ServiceError as e:
        _handle_service_error(e)

    payload = sessions.new_payload(admin.id, admin.email, admin.role)
    sessions.issue_cookie(response, payload)
    return AdminLoginResponse(admin=AdminSessionInfo.from_payload(payload))


@router.post("/logout", response_model=MessageResponse)
async def logout(
    response: Response,
    sessions: SessionManager = Depends(get_admin_sessions),
) -> MessageResponse:
    """Clear the admin session cookie."""
    sessions.clear_cookie(response)
    return MessageResponse(message="Logged out.")


@router.get("/me", response_model=AdminMeResponse)
async def me(admin: AuthenticatedAdmin = Depends(get_current_admin)) -> AdminMeResponse:
    """Return the current admin session."""
    return AdminMeResponse(
        admin=AdminSessionInfo(
            admin_id=admin.id,
            email=admin.email,
            role=admin.role,
            issued_at=admin.issued_at,
            last_active=admin.last_active,
        )
    )


@router.post("/password-reset/request", response_model=MessageResponse)
async def request_password_reset(
    data: PasswordResetRequest,
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    """
    Request a password reset link.

    Always responds with the same message whether or not the account exists.
    """
    await service.request_password_reset(db, data.email)
    return MessageResponse(
        message="If an account with that email exists, a password reset link has been sent."
    )


@router.post("/password-reset/reset", response_model=MessageResponse)
async def reset_password(
    data: PasswordResetConfirm,
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    """
    Reset a password using the emailed token.

    Raises:
        HTTPException 400: Weak password, or invalid/expired token
    """
    try:
        await service.reset_password(db, data.email, data.token, data.new_password)
    except ServiceError as e:
        _handle_service_error(e)

    return MessageResponse(message="Password has been reset. You can now log in.")
