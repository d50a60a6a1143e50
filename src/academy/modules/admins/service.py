"""
Admin Authentication Service

Business logic for admin login and password reset.

Security Features:
- Uniform INVALID_CREDENTIALS error for unknown email and wrong password
- Password reset requests never reveal whether an account exists
- Reset tokens are stored as SHA-256 hashes and expire after
  PASSWORD_RESET_TOKEN_EXPIRY_MINUTES
- Email failures are logged but never surface to the caller
"""

import hmac
import logging
from datetime import UTC, datetime, timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from academy.core.config import settings
from academy.core.email import send_password_reset_email
from academy.core.security import (
    generate_reset_token,
    hash_password,
    hash_token,
    validate_password_strength,
    verify_password,
)
from academy.modules.admins.models import Admin
from academy.modules.admins.repository import AdminRepository
from academy.modules.shared import InvalidCredentialsError, ServiceError

logger = logging.getLogger(__name__)


class AccountInactiveError(ServiceError):
    """Raised when a deactivated admin tries to log in."""

    def __init__(self):
        super().__init__(
            message="Your account has been deactivated.",
            error_code="ACCOUNT_INACTIVE",
            status_code=403,
        )


class InvalidResetTokenError(ServiceError):
    """Raised when a reset token doesn't match or has already been used."""

    def __init__(self):
        super().__init__(
            message="Invalid or expired reset token.",
            error_code="INVALID_RESET_TOKEN",
            status_code=400,
        )


class ResetTokenExpiredError(ServiceError):
    """Raised when a reset token is past its expiry."""

    def __init__(self):
        super().__init__(
            message="Reset token has expired. Please request a new one.",
            error_code="RESET_TOKEN_EXPIRED",
            status_code=400,
        )


class WeakPasswordError(ServiceError):
    """Raised when a new password fails the complexity rules."""

    def __init__(self, reason: str):
        super().__init__(
            message=reason,
            error_code="WEAK_PASSWORD",
            status_code=400,
        )


async def authenticate_admin(db: AsyncSession, email: str, password: str) -> Admin:
    """
    Verify admin credentials.

    Raises:
        InvalidCredentialsError: Unknown email or wrong password
        AccountInactiveError: Account is deactivated
    """
    admin = await AdminRepository.get_by_email(db, email)

    if admin is None:
        logger.warning(f"Admin login attempt for unknown email: {email}")
        raise InvalidCredentialsError()

    if not verify_password(password, admin.password_hash):
        logger.warning(f"Invalid password for admin: {admin.email}")
        raise InvalidCredentialsError()

    if not admin.is_active:
        logger.warning(f"Login attempt for inactive admin: {admin.email}")
        raise AccountInactiveError()

    await AdminRepository.record_login(db, admin)
    logger.info(f"Admin logged in: {admin.email} (role: {admin.role})")
    return admin


async def request_password_reset(db: AsyncSession, email: str) -> None:
    """
    Issue a password reset token and email it, if the admin exists.

    Always returns normally so callers cannot probe for registered emails.
    """
    admin = await AdminRepository.get_by_email(db, email)
    if admin is None:
        logger.info("Password reset requested for unknown admin email")
        return

    token = generate_reset_token()
    expiry_minutes = settings.password_reset_token_expiry_minutes
    expires_at = datetime.now(UTC) + timedelta(minutes=expiry_minutes)

    await AdminRepository.set_password_reset_token(db, admin, hash_token(token), expires_at)
    logger.info(f"Created password reset token for admin {admin.id}")

    try:
        email_sent = await send_password_reset_email(
            to_email=admin.email,
            user_name=admin.display_name,
            token=token,
            expiry_minutes=expiry_minutes,
        )
        if not email_sent:
            logger.error(f"Failed to send password reset email for admin {admin.id}")
    except Exception as e:
        logger.error(f"Error sending password reset email for admin {admin.id}: {e}")


async def reset_password(db: AsyncSession, email: str, token: str, new_password: str) -> Admin:
    """
    Set a new password using a reset token.

    Raises:
        WeakPasswordError: New password fails complexity rules
        InvalidResetTokenError: No matching outstanding token
        ResetTokenExpiredError: Token matched but has expired (it is cleared)
    """
    reason = validate_password_strength(new_password)
    if reason:
        raise WeakPasswordError(reason)

    admin = await AdminRepository.get_by_email(db, email)
    if admin is None or not admin.password_reset_token:
        logger.warning("Password reset attempted with no outstanding token")
        raise InvalidResetTokenError()

    if not hmac.compare_digest(admin.password_reset_token, hash_token(token)):
        logger.warning(f"Invalid password reset token for admin {admin.id}")
        raise InvalidResetTokenError()

    expiry = admin.password_reset_token_expiry
    if expiry is None:
        raise InvalidResetTokenError()
    if expiry.tzinfo is None:
        expiry = expiry.replace(tzinfo=UTC)
    if expiry < datetime.now(UTC):
        await AdminRepository.set_password_reset_token(db, admin, None, None)
        raise ResetTokenExpiredError()

    await AdminRepository.update_password(db, admin, hash_password(new_password))
    logger.info(f"Password reset completed for admin {admin.id}")
    return admin
