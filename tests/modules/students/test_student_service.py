"""
Unit tests for student authentication.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from academy.modules.shared import InvalidCredentialsError
from academy.modules.students.models import Profile, ProfileStatus
from academy.modules.students.service import ProfileNotApprovedError, authenticate_student

SERVICE = "academy.modules.students.service"


def _profile(status=ProfileStatus.APPROVED, password_hash="$2b$12$hash"):
    profile = MagicMock(spec=Profile)
    profile.id = "profile-1"
    profile.email = "ada@example.com"
    profile.password_hash = password_hash
    profile.status = status
    return profile


class TestAuthenticateStudent:
    """Tests for authenticate_student."""

    @pytest.mark.asyncio
    async def test_success(self, mock_db):
        """Approved profiles with a matching password log in."""
        profile = _profile()
        with (
            patch(f"{SERVICE}.ProfileRepository") as mock_repo,
            patch(f"{SERVICE}.verify_password", return_value=True),
        ):
            mock_repo.get_by_email = AsyncMock(return_value=profile)

            assert await authenticate_student(mock_db, "ada@example.com", "pw") is profile

    @pytest.mark.asyncio
    async def test_unknown_email(self, mock_db):
        """Unknown emails get the generic credentials error."""
        with patch(f"{SERVICE}.ProfileRepository") as mock_repo:
            mock_repo.get_by_email = AsyncMock(return_value=None)

            with pytest.raises(InvalidCredentialsError):
                await authenticate_student(mock_db, "nobody@example.com", "pw")

    @pytest.mark.asyncio
    async def test_password_not_set(self, mock_db):
        """Profiles that never set a password cannot log in."""
        with patch(f"{SERVICE}.ProfileRepository") as mock_repo:
            mock_repo.get_by_email = AsyncMock(return_value=_profile(password_hash=None))

            with pytest.raises(InvalidCredentialsError):
                await authenticate_student(mock_db, "ada@example.com", "pw")

    @pytest.mark.asyncio
    async def test_pending_profile(self, mock_db):
        """Correct credentials on a pending profile give 403."""
        with (
            patch(f"{SERVICE}.ProfileRepository") as mock_repo,
            patch(f"{SERVICE}.verify_password", return_value=True),
        ):
            mock_repo.get_by_email = AsyncMock(return_value=_profile(ProfileStatus.PENDING))

            with pytest.raises(ProfileNotApprovedError) as exc_info:
                await authenticate_student(mock_db, "ada@example.com", "pw")

            assert exc_info.value.status_code == 403
