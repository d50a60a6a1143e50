"""
Academy API - Main Application Entry Point

This module initializes and configures the FastAPI application including:
- Session signing configuration (fails fast when secrets are missing)
- Database and Redis connections
- Rate limiting store selection and middleware
- Background job scheduler
- CORS middleware
- API routing and health check endpoints
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from academy.api import api_router
from academy.core.config import settings
from academy.core.database import close_db, init_db
from academy.core.middleware import RateLimitMiddleware
from academy.core.rate_limit import (
    InMemoryRateLimitStore,
    RedisRateLimitStore,
    create_rate_limiter,
    register_rate_limit_jobs,
)
from academy.core.redis import close_redis, get_redis, init_redis, is_redis_available
from academy.core.scheduler import (
    list_registered_jobs,
    start_scheduler,
    stop_scheduler,
    trigger_job_manually,
)
from academy.core.session import get_admin_sessions, get_student_sessions


def _configure_rate_limiter(app: FastAPI) -> None:
    """Pick the counter store: Redis when requested and connected, else memory."""
    if settings.rate_limit_backend == "redis":
        client = get_redis()
        if client is not None:
            app.state.rate_limiter = create_rate_limiter(RedisRateLimitStore(client))
            print("[OK] Rate limiting backed by Redis")
            return
        print("[WARN] RATE_LIMIT_BACKEND=redis but Redis is unavailable, using memory")

    store = InMemoryRateLimitStore()
    app.state.rate_limiter = create_rate_limiter(store)
    register_rate_limit_jobs(store)
    print("[OK] Rate limiting backed by process memory")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Handles startup and shutdown events including:
    - Session secret validation (fatal when missing)
    - Redis connection
    - Database connection
    - Rate limiter store and background job scheduler
    """
    print(f"Starting Academy API in {settings.python_env} mode...")

    # Missing signing secrets are a startup error, never a per-request failure
    get_admin_sessions()
    get_student_sessions()
    print("[OK] Session signing configured")

    if settings.rate_limit_backend == "redis":
        try:
            await init_redis()
            print("[OK] Redis connected")
        except Exception as e:
            print(f"[FAIL] Redis connection failed: {e}")
            if settings.is_production:
                raise

    try:
        await init_db()
        print("[OK] Database connected")
    except Exception as e:
        print(f"[FAIL] Database connection failed: {e}")
        if settings.is_production:
            raise

    _configure_rate_limiter(app)

    try:
        await start_scheduler()
        print("[OK] Background scheduler started")
    except Exception as e:
        print(f"[FAIL] Background scheduler failed to start: {e}")
        if settings.is_production:
            raise

    yield  # Application runs here

    print("Shutting down Academy API...")

    await stop_scheduler()
    print("[OK] Background scheduler stopped")

    if is_redis_available():
        await close_redis()
    await close_db()
    print("[OK] Cleanup complete")


app = FastAPI(
    title="Academy API",
    description="Academy back-office and student API",
    version="0.1.0",
    docs_url="/docs" if settings.is_development else None,
    redoc_url="/redoc" if settings.is_development else None,
    lifespan=lifespan,
)

# Replaced during startup once the store backend is known
app.state.rate_limiter = create_rate_limiter(InMemoryRateLimitStore())

app.include_router(api_router, prefix="/api")

app.add_middleware(RateLimitMiddleware)

# CORS configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/", tags=["Root"])
async def root() -> dict[str, str]:
    """Root endpoint - API welcome message."""
    return {
        "message": "Welcome to Academy API",
        "status": "running",
        "environment": settings.python_env,
    }


@app.get("/health", tags=["Health"])
async def health_check() -> dict[str, str]:
    """Health check endpoint for container orchestration."""
    return {"status": "healthy"}


@app.get("/ready", tags=["Health"])
async def readiness_check() -> dict[str, str]:
    """Readiness check endpoint."""
    return {"status": "ready"}


# Background job debug endpoints, development only.
# In other environments jobs only run on their schedule.
if settings.is_development:

    @app.get("/debug/jobs", tags=["Debug"])
    async def list_jobs():
        """List registered background jobs and their next run time."""
        return {"jobs": list_registered_jobs()}

    @app.post("/debug/jobs/{job_id}/trigger", tags=["Debug"])
    async def trigger_job(job_id: str):
        """
        Run a background job immediately (e.g. rate_limit_sweep).

        Raises:
            HTTPException 400: If job_id is not registered.
        """
        try:
            return await trigger_job_manually(job_id)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e)) from e
