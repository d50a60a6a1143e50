"""
Students module - Student profiles and student authentication.
"""

from academy.modules.students.models import Profile, ProfileStatus
from academy.modules.students.router import router

__all__ = ["Profile", "ProfileStatus", "router"]
