"""
Core module - Configuration, database, sessions, rate limiting, and utilities.
"""

from academy.core.config import get_settings, settings
from academy.core.database import Base, close_db, get_db, init_db
from academy.core.redis import close_redis, get_redis, init_redis
from academy.core.security import hash_password, verify_password
from academy.core.session import (
    SessionConfigurationError,
    SessionManager,
    SessionPayload,
    get_admin_sessions,
    get_student_sessions,
)

__all__ = [
    # Config
    "settings",
    "get_settings",
    # Database
    "Base",
    "get_db",
    "init_db",
    "close_db",
    # Redis
    "get_redis",
    "init_redis",
    "close_redis",
    # Security
    "hash_password",
    "verify_password",
    # Sessions
    "SessionConfigurationError",
    "SessionManager",
    "SessionPayload",
    "get_admin_sessions",
    "get_student_sessions",
]
