"""
Cohorts Module

Cohort class scheduling:
1. Session date generation (3 per week, Sundays excluded)
2. Regeneration of one cohort's sessions
3. Bulk regeneration for every dated cohort

API Endpoints:
- POST /admin/cohorts/{id}/generate-sessions
- GET /admin/cohorts/{id}/sessions
- POST /cohorts/generate-all-sessions
"""

from .generator import InvalidDateRangeError, generate_cohort_sessions, validate_cohort_dates
from .router import admin_router, router

__all__ = [
    "InvalidDateRangeError",
    "admin_router",
    "generate_cohort_sessions",
    "router",
    "validate_cohort_dates",
]
