"""
Student Repository

Database operations for student profiles.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from academy.modules.students.models import Profile


class ProfileRepository:
    """Repository for student profile database operations."""

    @staticmethod
    async def get_by_id(db: AsyncSession, profile_id: str) -> Profile | None:
        """Get a profile by ID."""
        result = await db.execute(select(Profile).where(Profile.id == str(profile_id)))
        return result.scalar_one_or_none()

    @staticmethod
    async def get_by_email(db: AsyncSession, email: str) -> Profile | None:
        """Get a profile by email address (case-insensitive)."""
        result = await db.execute(select(Profile).where(Profile.email == email.strip().lower()))
        return result.scalar_one_or_none()
