"""Admin authentication schemas."""

from pydantic import BaseModel, EmailStr, Field

from academy.core.session import SessionPayload


class AdminLoginRequest(BaseModel):
    """Admin login request schema."""

    email: EmailStr
    password: str = Field(..., min_length=1, max_length=256)


class AdminSessionInfo(BaseModel):
    """Session details returned to the admin UI."""

    admin_id: str
    email: str
    role: str | None = None
    issued_at: int
    last_active: int

    @classmethod
    def from_payload(cls, payload: SessionPayload) -> "AdminSessionInfo":
        return cls(
            admin_id=payload.subject_id,
            email=payload.email,
            role=payload.role,
            issued_at=payload.issued_at,
            last_active=payload.last_active,
        )


class AdminLoginResponse(BaseModel):
    success: bool = True
    admin: AdminSessionInfo


class AdminMeResponse(BaseModel):
    admin: AdminSessionInfo


class PasswordResetRequest(BaseModel):
    email: EmailStr


class PasswordResetConfirm(BaseModel):
    email: EmailStr
    token: str = Field(..., min_length=1, max_length=128)
    new_password: str = Field(..., min_length=1, max_length=256)


class MessageResponse(BaseModel):
    success: bool = True
    message: str
