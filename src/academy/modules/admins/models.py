"""
Admin Models

Back-office accounts authenticated through the admin session cookie.
"""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from academy.modules.shared import BaseModel


class Admin(BaseModel):
    """
    Admin account.

    Emails are stored lower-cased so lookups are case-insensitive.
    Password reset tokens are stored as SHA-256 hashes, never in plain text.
    """

    __tablename__ = "admins"

    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        index=True,
        nullable=False,
    )
    password_hash: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )
    role: Mapped[str | None] = mapped_column(
        String(50),
        nullable=True,
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
    )

    # Password reset
    password_reset_token: Mapped[str | None] = mapped_column(
        String(64),
        nullable=True,
        index=True,
    )
    password_reset_token_expiry: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    last_login_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"<Admin(id={self.id}, email={self.email}, role={self.role})>"

    @property
    def display_name(self) -> str:
        """Name used in emails (local part of the address)."""
        return self.email.split("@")[0]
