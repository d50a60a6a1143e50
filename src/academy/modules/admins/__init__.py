"""
Admins module - Back-office accounts and admin authentication.

API Endpoints:
- POST /admin/login, POST /admin/logout, GET /admin/me
- POST /admin/password-reset/request, POST /admin/password-reset/reset
"""

from academy.modules.admins.models import Admin
from academy.modules.admins.repository import AdminRepository
from academy.modules.admins.router import router

__all__ = ["Admin", "AdminRepository", "router"]
