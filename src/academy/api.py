from fastapi import APIRouter

from academy.modules.admins import router as admin_auth_router
from academy.modules.cohorts import admin_router as admin_cohorts_router
from academy.modules.cohorts import router as cohorts_router
from academy.modules.students import router as student_auth_router

api_router = APIRouter()

api_router.include_router(admin_auth_router, prefix="/admin", tags=["Admin - Authentication"])

api_router.include_router(
    admin_cohorts_router,
    prefix="/admin/cohorts",
    tags=["Admin - Cohorts"],
)

api_router.include_router(cohorts_router, prefix="/cohorts", tags=["Cohorts"])

api_router.include_router(student_auth_router, prefix="/profile", tags=["Student Authentication"])


@api_router.get("/health", tags=["Health"])
async def api_health() -> dict[str, str]:
    """Health check under the API prefix (exempt from rate limiting)."""
    return {"status": "healthy"}
