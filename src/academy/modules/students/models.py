"""
Student Models

Student profiles, created from approved applications.
"""

from enum import Enum

from sqlalchemy import String, Text
from sqlalchemy.dialects.postgresql import ENUM
from sqlalchemy.orm import Mapped, mapped_column

from academy.modules.shared import BaseModel


class ProfileStatus(str, Enum):
    """Lifecycle status of a student profile."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class Profile(BaseModel):
    """
    Student profile.

    password_hash stays NULL until the student completes password setup;
    such profiles cannot log in.
    """

    __tablename__ = "profiles"

    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        index=True,
        nullable=False,
    )
    name: Mapped[str] = mapped_column(
        String(200),
        nullable=False,
    )
    password_hash: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )
    status: Mapped[ProfileStatus] = mapped_column(
        ENUM(
            ProfileStatus,
            name="profile_status",
            create_type=True,
            values_callable=lambda enum: [member.value for member in enum],
        ),
        nullable=False,
        default=ProfileStatus.PENDING,
    )

    def __repr__(self) -> str:
        return f"<Profile(id={self.id}, email={self.email}, status={self.status.value})>"
