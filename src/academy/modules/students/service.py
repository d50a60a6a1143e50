"""
Student Authentication Service
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from academy.core.security import verify_password
from academy.modules.shared import InvalidCredentialsError, ServiceError
from academy.modules.students.models import Profile, ProfileStatus
from academy.modules.students.repository import ProfileRepository

logger = logging.getLogger(__name__)


class ProfileNotApprovedError(ServiceError):
    """Raised when a profile that isn't approved tries to log in."""

    def __init__(self):
        super().__init__(
            message="Your application has not been approved yet.",
            error_code="PROFILE_NOT_APPROVED",
            status_code=403,
        )


async def authenticate_student(db: AsyncSession, email: str, password: str) -> Profile:
    """
    Verify student credentials.

    Profiles without a password (setup not completed) fail like a wrong
    password.

    Raises:
        InvalidCredentialsError: Unknown email, no password set, or wrong password
        ProfileNotApprovedError: Credentials valid but profile not approved
    """
    profile = await ProfileRepository.get_by_email(db, email)

    if profile is None or not verify_password(password, profile.password_hash):
        logger.warning(f"Failed student login for: {email}")
        raise InvalidCredentialsError()

    if profile.status != ProfileStatus.APPROVED:
        logger.warning(f"Student login blocked, profile {profile.id} is {profile.status.value}")
        raise ProfileNotApprovedError()

    logger.info(f"Student logged in: {profile.id}")
    return profile


async def get_profile(db: AsyncSession, profile_id: str) -> Profile | None:
    return await ProfileRepository.get_by_id(db, profile_id)
