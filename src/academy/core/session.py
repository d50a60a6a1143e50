"""
Signed Session Tokens

Stateless authentication tokens carried in HTTP-only cookies.

Token format:
    base64url(JSON payload) + "." + base64url(HMAC-SHA256(body))

A token is accepted only while BOTH hold:
    now - issued_at   <= absolute_max_age
    now - last_active <= idle_timeout

Every successful check returns a payload with ``last_active = now``; the
caller re-issues the cookie so the idle window slides, bounded by the
absolute ceiling.

Two managers exist, one per principal type (admin, student). Each signs
with its own key and uses its own cookie, so a token minted for one is
never accepted by the other.

SECURITY NOTE:
- Verification failures are never distinguished to the caller
  (bad signature, malformed, expired and missing all return None).
- A missing signing secret is a configuration error raised at startup,
  not a per-request 401.
"""

import base64
import binascii
import hashlib
import hmac
import json
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, replace
from functools import lru_cache
from typing import Any

from starlette.requests import Request
from starlette.responses import Response

from academy.core.config import settings

logger = logging.getLogger(__name__)

ADMIN_COOKIE_NAME = "admin_session"
STUDENT_COOKIE_NAME = "student_session"

PRINCIPAL_ADMIN = "admin"
PRINCIPAL_STUDENT = "student"


class SessionConfigurationError(RuntimeError):
    """Raised when no signing secret is configured for a session manager."""


def now_ms() -> int:
    """Current time as epoch milliseconds."""
    return int(time.time() * 1000)


def normalize_email(email: str) -> str:
    return email.strip().lower()


def _b64encode(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def _b64decode(data: str) -> bytes:
    padding = "=" * (-len(data) % 4)
    return base64.urlsafe_b64decode(data + padding)


@dataclass(frozen=True)
class SessionPayload:
    """
    Claims carried inside a signed session token.

    Attributes:
        subject_id: Opaque identifier of the principal (admin or profile id)
        email: Normalized email of the principal
        role: Optional role label (admins only)
        principal_type: "admin" or "student"
        issued_at: Epoch ms, set once at login
        last_active: Epoch ms, refreshed on every authenticated request
    """

    subject_id: str
    email: str
    role: str | None
    principal_type: str
    issued_at: int
    last_active: int

    def to_claims(self) -> dict[str, Any]:
        return {
            "sub": self.subject_id,
            "email": self.email,
            "role": self.role,
            "typ": self.principal_type,
            "iat": self.issued_at,
            "lat": self.last_active,
        }

    @classmethod
    def from_claims(cls, claims: Any) -> "SessionPayload":
        """
        Build a payload from decoded claims.

        Raises:
            ValueError: If a claim is missing or has the wrong type
        """
        if not isinstance(claims, dict):
            raise ValueError("Session claims must be an object")

        subject_id = claims.get("sub")
        email = claims.get("email")
        role = claims.get("role")
        principal_type = claims.get("typ")
        issued_at = claims.get("iat")
        last_active = claims.get("lat")

        if not isinstance(subject_id, str) or not subject_id:
            raise ValueError("Missing 'sub' claim")
        if not isinstance(email, str):
            raise ValueError("Missing 'email' claim")
        if role is not None and not isinstance(role, str):
            raise ValueError("Invalid 'role' claim")
        if not isinstance(principal_type, str):
            raise ValueError("Missing 'typ' claim")
        for name, value in (("iat", issued_at), ("lat", last_active)):
            # bool is an int subclass; reject it explicitly
            if not isinstance(value, int) or isinstance(value, bool):
                raise ValueError(f"Invalid '{name}' claim")

        return cls(
            subject_id=subject_id,
            email=email,
            role=role,
            principal_type=principal_type,
            issued_at=issued_at,
            last_active=last_active,
        )


class SessionManager:
    """
    Signs, verifies and transports session tokens for one principal type.

    Args:
        principal_type: "admin" or "student"; embedded in and checked on every token
        cookie_name: Name of the HTTP-only cookie carrying the token
        secret: HMAC signing key
        idle_timeout_ms: Max gap between authenticated requests
        absolute_max_age_ms: Hard ceiling on total session lifetime
        secure_cookies: Whether to mark cookies Secure
        clock: Returns the current epoch ms (injectable for tests)
    """

    def __init__(
        self,
        *,
        principal_type: str,
        cookie_name: str,
        secret: bytes | str | None,
        idle_timeout_ms: int,
        absolute_max_age_ms: int,
        secure_cookies: bool = True,
        clock: Callable[[], int] = now_ms,
    ):
        if not secret:
            raise SessionConfigurationError(
                f"No signing secret configured for {principal_type} sessions. "
                "Set SESSION_SECRET (or the per-principal override) in the environment."
            )
        self.principal_type = principal_type
        self.cookie_name = cookie_name
        self._key = secret.encode("utf-8") if isinstance(secret, str) else secret
        self.idle_timeout_ms = idle_timeout_ms
        self.absolute_max_age_ms = absolute_max_age_ms
        self.secure_cookies = secure_cookies
        self._clock = clock

    def _signature(self, body: str) -> str:
        digest = hmac.new(self._key, body.encode("ascii"), hashlib.sha256).digest()
        return _b64encode(digest)

    def new_payload(self, subject_id: str, email: str, role: str | None = None) -> SessionPayload:
        """Create a fresh payload for a principal that just logged in."""
        now = self._clock()
        return SessionPayload(
            subject_id=str(subject_id),
            email=normalize_email(email),
            role=role,
            principal_type=self.principal_type,
            issued_at=now,
            last_active=now,
        )

    def sign(self, payload: SessionPayload) -> str:
        """Serialize and sign a payload into a compact token."""
        raw = json.dumps(payload.to_claims(), separators=(",", ":")).encode("utf-8")
        body = _b64encode(raw)
        return f"{body}.{self._signature(body)}"

    def verify(self, token: str | None) -> SessionPayload | None:
        """
        Validate a token and return its payload.

        Returns:
            The payload if the signature matches and neither timeout has
            elapsed, otherwise None.
        """
        if not token:
            return None

        parts = token.split(".")
        if len(parts) != 2:
            return None
        body, signature = parts
        if not body or not signature:
            return None

        try:
            expected = self._signature(body)
        except UnicodeEncodeError:
            return None
        if not hmac.compare_digest(expected.encode("ascii"), signature.encode("utf-8")):
            return None

        try:
            payload = SessionPayload.from_claims(json.loads(_b64decode(body)))
        except (binascii.Error, UnicodeDecodeError, ValueError):
            return None

        if payload.principal_type != self.principal_type:
            return None

        now = self._clock()
        if now - payload.issued_at > self.absolute_max_age_ms:
            return None
        if now - payload.last_active > self.idle_timeout_ms:
            return None

        return payload

    def issue_cookie(self, response: Response, payload: SessionPayload) -> None:
        """Write the signed token into the session cookie on ``response``."""
        response.set_cookie(
            key=self.cookie_name,
            value=self.sign(payload),
            max_age=self.absolute_max_age_ms // 1000,
            path="/",
            secure=self.secure_cookies,
            httponly=True,
            samesite="lax",
        )

    def clear_cookie(self, response: Response) -> None:
        """
        Overwrite the session cookie with an empty, immediately expiring value.

        A cookie already queued on ``response`` (e.g. a refresh) is dropped.
        """
        queued = f"{self.cookie_name}=".encode("latin-1")
        response.raw_headers[:] = [
            (name, value)
            for name, value in response.raw_headers
            if not (name == b"set-cookie" and value.startswith(queued))
        ]
        response.set_cookie(
            key=self.cookie_name,
            value="",
            max_age=0,
            path="/",
            secure=self.secure_cookies,
            httponly=True,
            samesite="lax",
        )

    def require_auth(self, request: Request) -> SessionPayload | None:
        """
        Authenticate a request from its session cookie.

        Returns:
            The payload with ``last_active`` refreshed to now, or None.
            The caller should pass the result to ``issue_cookie`` on the
            outgoing response to extend the idle window.
        """
        payload = self.verify(request.cookies.get(self.cookie_name))
        if payload is None:
            return None
        return replace(payload, last_active=self._clock())


def _derive_key(root_secret: str, principal_type: str) -> bytes:
    """Derive a per-principal signing key from the shared root secret."""
    label = f"academy:{principal_type}-session".encode()
    return hmac.new(root_secret.encode("utf-8"), label, hashlib.sha256).digest()


def _resolve_secret(override: str | None, principal_type: str) -> bytes | str | None:
    if override:
        return override
    if settings.session_secret:
        return _derive_key(settings.session_secret, principal_type)
    return None


def _build_manager(principal_type: str, cookie_name: str, override: str | None) -> SessionManager:
    manager = SessionManager(
        principal_type=principal_type,
        cookie_name=cookie_name,
        secret=_resolve_secret(override, principal_type),
        idle_timeout_ms=settings.session_idle_timeout_ms,
        absolute_max_age_ms=settings.session_absolute_timeout_ms,
        secure_cookies=not settings.is_development,
    )
    logger.debug(f"Configured {principal_type} session manager (cookie: {cookie_name})")
    return manager


@lru_cache
def get_admin_sessions() -> SessionManager:
    """
    Session manager for admin principals.

    Raises:
        SessionConfigurationError: If no secret is configured
    """
    return _build_manager(PRINCIPAL_ADMIN, ADMIN_COOKIE_NAME, settings.admin_session_secret)


@lru_cache
def get_student_sessions() -> SessionManager:
    """
    Session manager for student principals.

    Raises:
        SessionConfigurationError: If no secret is configured
    """
    return _build_manager(PRINCIPAL_STUDENT, STUDENT_COOKIE_NAME, settings.student_session_secret)


__all__ = [
    "ADMIN_COOKIE_NAME",
    "STUDENT_COOKIE_NAME",
    "SessionConfigurationError",
    "SessionManager",
    "SessionPayload",
    "get_admin_sessions",
    "get_student_sessions",
    "normalize_email",
    "now_ms",
]
