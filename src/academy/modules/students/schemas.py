"""Student authentication schemas."""

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from academy.modules.students.models import ProfileStatus


class StudentLoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=256)


class ProfileResponse(BaseModel):
    """Public profile fields returned to the student UI."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    email: str
    status: ProfileStatus


class StudentLoginResponse(BaseModel):
    success: bool = True
    profile: ProfileResponse


class VerifySessionResponse(BaseModel):
    valid: bool
    profile: ProfileResponse | None = None
