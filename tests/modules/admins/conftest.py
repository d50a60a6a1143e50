"""
Fixtures for admin tests.
"""

from unittest.mock import MagicMock
from uuid import uuid4

import pytest

from academy.modules.admins.models import Admin


@pytest.fixture
def sample_admin():
    """An active admin account."""
    admin = MagicMock(spec=Admin)
    admin.id = str(uuid4())
    admin.email = "ops@example.com"
    admin.role = "owner"
    admin.is_active = True
    admin.password_hash = "$2b$12$hash"
    admin.password_reset_token = None
    admin.password_reset_token_expiry = None
    admin.display_name = "ops"
    return admin
