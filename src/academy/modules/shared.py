"""
Shared model base.

Every table gets a UUID primary key and created/updated timestamps.
"""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from academy.core.database import Base


class BaseModel(Base):
    """Abstract base with id and timestamps."""

    __abstract__ = True

    id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )


class ServiceError(Exception):
    """Base exception for service-layer errors mapped to HTTP responses."""

    def __init__(self, message: str, error_code: str, status_code: int = 400):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        super().__init__(message)


class InvalidCredentialsError(ServiceError):
    """Raised when an email/password pair does not match an active account."""

    def __init__(self):
        super().__init__(
            message="Invalid email or password.",
            error_code="INVALID_CREDENTIALS",
            status_code=401,
        )
