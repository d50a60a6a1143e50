"""
Admin Repository

Database operations for admin accounts.
"""

import logging
from datetime import UTC, datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from academy.modules.admins.models import Admin

logger = logging.getLogger(__name__)


class AdminRepository:
    """Repository for admin database operations."""

    @staticmethod
    async def create(
        db: AsyncSession,
        *,
        email: str,
        password_hash: str,
        role: str | None = None,
        is_active: bool = True,
    ) -> Admin:
        """
        Create a new admin record.

        Args:
            db: Database session
            email: Admin's email address (stored lower-cased)
            password_hash: bcrypt hash of the password
            role: Optional role label
            is_active: Whether the account may log in

        Returns:
            Created Admin instance
        """
        admin = Admin(
            email=email.strip().lower(),
            password_hash=password_hash,
            role=role,
            is_active=is_active,
        )

        db.add(admin)
        await db.flush()
        await db.refresh(admin)

        logger.info(f"Created admin: {admin.id} - {admin.email}")
        return admin

    @staticmethod
    async def get_by_id(db: AsyncSession, admin_id: str) -> Admin | None:
        """Get an admin by ID."""
        result = await db.execute(select(Admin).where(Admin.id == str(admin_id)))
        return result.scalar_one_or_none()

    @staticmethod
    async def get_by_email(db: AsyncSession, email: str) -> Admin | None:
        """
        Get an admin by email address (case-insensitive).

        Args:
            db: Database session
            email: Email address

        Returns:
            Admin instance or None if not found
        """
        result = await db.execute(select(Admin).where(Admin.email == email.strip().lower()))
        return result.scalar_one_or_none()

    @staticmethod
    async def record_login(db: AsyncSession, admin: Admin) -> None:
        """Stamp the last successful login time."""
        admin.last_login_at = datetime.now(UTC)
        await db.commit()

    @staticmethod
    async def set_password_reset_token(
        db: AsyncSession,
        admin: Admin,
        token_hash: str | None,
        expires_at: datetime | None,
    ) -> None:
        """Store (or clear, when None) the hashed reset token and its expiry."""
        admin.password_reset_token = token_hash
        admin.password_reset_token_expiry = expires_at
        await db.commit()

    @staticmethod
    async def update_password(db: AsyncSession, admin: Admin, password_hash: str) -> None:
        """Replace the password hash and invalidate any outstanding reset token."""
        admin.password_hash = password_hash
        admin.password_reset_token = None
        admin.password_reset_token_expiry = None
        await db.commit()
