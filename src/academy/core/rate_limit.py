"""
Rate Limiting Module

Fixed-window request counters keyed by ``{path}:{client_ip}``.

Counter storage is pluggable through ``RateLimitStore``:
- InMemoryRateLimitStore: process-local, guarded by a lock. Counters do not
  survive restarts and are not shared between instances.
- RedisRateLimitStore: shared counters using an atomic INCR with a PX expiry,
  so every instance enforces the same global limit.

SECURITY: Rate limiting blunts abuse of sensitive endpoints like:
- Authentication endpoints (prevents brute force)
- Password reset and application endpoints (prevents spam)
- Submission and upload endpoints

Clients that keep hitting the limit are blocked across all paths for a
configurable duration.
"""

import logging
import re
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass

from apscheduler.triggers.interval import IntervalTrigger
from redis.asyncio import Redis

from academy.core.config import settings
from academy.core.scheduler import register_job
from academy.core.session import now_ms

logger = logging.getLogger(__name__)

MINUTE_MS = 60 * 1000
HOUR_MS = 60 * MINUTE_MS

JOB_ID_SWEEP = "rate_limit_sweep"

# How long past blocks of an IP are remembered when sizing the next one
OFFENCE_MEMORY_MS = 24 * HOUR_MS


@dataclass(frozen=True)
class RateLimitConfig:
    """Maximum number of requests allowed per window."""

    max_requests: int
    window_ms: int

    @property
    def window_seconds(self) -> int:
        return self.window_ms // 1000


# Named policies. Sensitive endpoints carry tighter limits than reads.
RATE_LIMITS: dict[str, RateLimitConfig] = {
    "AUTH": RateLimitConfig(max_requests=5, window_ms=15 * MINUTE_MS),
    "ASSIGNMENT_SUBMIT": RateLimitConfig(max_requests=20, window_ms=15 * MINUTE_MS),
    "BLOG_SUBMIT": RateLimitConfig(max_requests=5, window_ms=HOUR_MS),
    "UPLOAD": RateLimitConfig(max_requests=10, window_ms=HOUR_MS),
    "EXAM_SUBMIT": RateLimitConfig(max_requests=10, window_ms=30 * MINUTE_MS),
    "APPLICATION_SUBMIT": RateLimitConfig(max_requests=5, window_ms=HOUR_MS),
    "EVENT_REGISTRATION": RateLimitConfig(max_requests=5, window_ms=15 * MINUTE_MS),
    "ADMIN": RateLimitConfig(max_requests=200, window_ms=15 * MINUTE_MS),
    "API_READ": RateLimitConfig(max_requests=100, window_ms=15 * MINUTE_MS),
    "API_WRITE": RateLimitConfig(max_requests=50, window_ms=15 * MINUTE_MS),
}


@dataclass(frozen=True)
class RateLimitRule:
    """Maps a path pattern (and optionally a set of methods) to a policy."""

    policy: str
    pattern: re.Pattern[str]
    methods: frozenset[str] | None = None

    def matches(self, path: str, method: str) -> bool:
        if self.methods is not None and method.upper() not in self.methods:
            return False
        return self.pattern.search(path) is not None


# Evaluated in order; first match wins.
RATE_LIMIT_RULES: tuple[RateLimitRule, ...] = (
    RateLimitRule("AUTH", re.compile(r"/(login|register|password|reset-password)")),
    RateLimitRule("ASSIGNMENT_SUBMIT", re.compile(r"/assignments/submit")),
    RateLimitRule("BLOG_SUBMIT", re.compile(r"/blog/submit")),
    RateLimitRule("UPLOAD", re.compile(r"/upload")),
    RateLimitRule("EXAM_SUBMIT", re.compile(r"/exam/submit")),
    RateLimitRule("APPLICATION_SUBMIT", re.compile(r"/(application|submit-application|apply)")),
    RateLimitRule("EVENT_REGISTRATION", re.compile(r"/events/.+/register")),
    RateLimitRule("ADMIN", re.compile(r"/admin/")),
)

_READ_METHODS = frozenset({"GET", "HEAD"})


def config_for(path: str, method: str = "GET") -> RateLimitConfig:
    """
    Look up the rate limit policy for an endpoint.

    Args:
        path: Request path (e.g. "/api/admin/login")
        method: HTTP method

    Returns:
        The first matching rule's policy, or API_READ / API_WRITE by method
    """
    for rule in RATE_LIMIT_RULES:
        if rule.matches(path, method):
            return RATE_LIMITS[rule.policy]

    if method.upper() in _READ_METHODS:
        return RATE_LIMITS["API_READ"]
    return RATE_LIMITS["API_WRITE"]


@dataclass
class RateLimitRecord:
    """Request count for one key and the epoch ms at which its window resets."""

    count: int
    reset_time: int


class RateLimitStore(ABC):
    """Counter storage used by ``RateLimiter``."""

    @abstractmethod
    async def get(self, key: str) -> RateLimitRecord | None:
        """Return the current record for ``key`` or None."""

    @abstractmethod
    async def increment(self, key: str, window_ms: int, now: int) -> RateLimitRecord:
        """
        Atomically count one hit for ``key``.

        Starts a fresh window (count=1, reset_time=now+window_ms) when no
        record exists or the existing window has elapsed.
        """

    @abstractmethod
    async def reset(self, key: str) -> None:
        """Discard the record for ``key``."""


class InMemoryRateLimitStore(RateLimitStore):
    """
    Process-local counter store.

    Note: This doesn't work across multiple server instances; each instance
    enforces its own limit. Stale keys are replaced lazily on next access,
    and ``sweep`` can be scheduled to bound memory growth.
    """

    def __init__(self) -> None:
        self._records: dict[str, RateLimitRecord] = {}
        self._lock = threading.Lock()

    async def get(self, key: str) -> RateLimitRecord | None:
        with self._lock:
            record = self._records.get(key)
            if record is None:
                return None
            return RateLimitRecord(count=record.count, reset_time=record.reset_time)

    async def increment(self, key: str, window_ms: int, now: int) -> RateLimitRecord:
        with self._lock:
            record = self._records.get(key)
            if record is None or now >= record.reset_time:
                record = RateLimitRecord(count=1, reset_time=now + window_ms)
                self._records[key] = record
            else:
                record.count += 1
            return RateLimitRecord(count=record.count, reset_time=record.reset_time)

    async def reset(self, key: str) -> None:
        with self._lock:
            self._records.pop(key, None)

    def sweep(self, now: int) -> int:
        """
        Remove records whose window has elapsed.

        Returns:
            Number of records removed
        """
        with self._lock:
            expired = [key for key, record in self._records.items() if now >= record.reset_time]
            for key in expired:
                del self._records[key]
        return len(expired)

    def __len__(self) -> int:
        return len(self._records)


class RedisRateLimitStore(RateLimitStore):
    """
    Redis-backed counter store shared by all server instances.

    Each key holds an integer counter with a millisecond TTL equal to the
    window, so Redis expires stale windows itself.
    """

    def __init__(self, client: Redis, prefix: str = "rate_limit:"):
        self._client = client
        self._prefix = prefix

    def _key(self, key: str) -> str:
        return f"{self._prefix}{key}"

    async def get(self, key: str) -> RateLimitRecord | None:
        pipe = self._client.pipeline()
        pipe.get(self._key(key))
        pipe.pttl(self._key(key))
        value, ttl = await pipe.execute()

        if value is None or ttl is None or ttl < 0:
            return None
        return RateLimitRecord(count=int(value), reset_time=now_ms() + int(ttl))

    async def increment(self, key: str, window_ms: int, now: int) -> RateLimitRecord:
        redis_key = self._key(key)

        # MULTI/EXEC: create the window if absent, count the hit, read the TTL
        pipe = self._client.pipeline()
        pipe.set(redis_key, 0, px=window_ms, nx=True)
        pipe.incr(redis_key)
        pipe.pttl(redis_key)
        _, count, ttl = await pipe.execute()

        ttl = int(ttl)
        if ttl < 0:
            # Key lost its expiry (should not happen); restore the window
            await self._client.pexpire(redis_key, window_ms)
            ttl = window_ms

        return RateLimitRecord(count=int(count), reset_time=now + ttl)

    async def reset(self, key: str) -> None:
        await self._client.delete(self._key(key))


@dataclass(frozen=True)
class RateLimitResult:
    """Outcome of a rate limit check."""

    allowed: bool
    limit: int
    remaining: int
    reset_time: int
    blocked: bool = False


class RateLimiter:
    """
    Applies ``RateLimitConfig`` policies against a ``RateLimitStore``.

    Args:
        store: Counter storage
        block_after_violations: Denials within the block window after which
            the client IP is blocked on every path (0 disables blocking)
        block_duration_ms: How long a first block lasts (the n-th block within
            a day lasts n times as long); also the window in
            which violations are counted
        clock: Returns the current epoch ms (injectable for tests)
    """

    def __init__(
        self,
        store: RateLimitStore,
        *,
        block_after_violations: int = 0,
        block_duration_ms: int = HOUR_MS,
        clock=now_ms,
    ):
        self.store = store
        self.block_after_violations = block_after_violations
        self.block_duration_ms = block_duration_ms
        self._clock = clock

    @property
    def blocking_enabled(self) -> bool:
        return self.block_after_violations > 0

    async def check(
        self,
        key: str,
        config: RateLimitConfig,
        client_ip: str | None = None,
    ) -> RateLimitResult:
        """
        Count a request against ``key`` and decide whether it is allowed.

        Args:
            key: Composite key, normally "{path}:{client_ip}"
            config: Policy to enforce
            client_ip: Client address used for repeat-offender blocking

        Returns:
            RateLimitResult; ``blocked`` is True when the IP is blocked
        """
        now = self._clock()

        if client_ip and self.blocking_enabled:
            block = await self.store.get(f"blocked:{client_ip}")
            if block is not None and block.reset_time > now:
                return RateLimitResult(
                    allowed=False,
                    limit=config.max_requests,
                    remaining=0,
                    reset_time=block.reset_time,
                    blocked=True,
                )

        record = await self.store.increment(key, config.window_ms, now)

        if record.count > config.max_requests:
            logger.warning(
                f"Rate limit exceeded for {key}: "
                f"{config.max_requests}/{config.window_seconds}s"
            )
            if client_ip and self.blocking_enabled:
                await self._record_violation(client_ip, now)
            return RateLimitResult(
                allowed=False,
                limit=config.max_requests,
                remaining=0,
                reset_time=record.reset_time,
            )

        return RateLimitResult(
            allowed=True,
            limit=config.max_requests,
            remaining=max(0, config.max_requests - record.count),
            reset_time=record.reset_time,
        )

    async def _record_violation(self, client_ip: str, now: int) -> None:
        violations_key = f"violations:{client_ip}"
        violations = await self.store.increment(violations_key, self.block_duration_ms, now)

        if violations.count >= self.block_after_violations:
            # Each repeat block within a day lasts one block duration longer
            offences = await self.store.increment(f"offences:{client_ip}", OFFENCE_MEMORY_MS, now)
            duration_ms = offences.count * self.block_duration_ms

            await self.store.reset(violations_key)
            await self.store.reset(f"blocked:{client_ip}")
            await self.store.increment(f"blocked:{client_ip}", duration_ms, now)
            logger.warning(
                f"SECURITY: IP {client_ip} blocked for {duration_ms // 1000}s "
                f"after {violations.count} rate limit violations (block #{offences.count})"
            )


def create_rate_limiter(store: RateLimitStore) -> RateLimiter:
    """Build a limiter using the blocking settings from the environment."""
    return RateLimiter(
        store,
        block_after_violations=settings.rate_limit_block_after_violations,
        block_duration_ms=settings.rate_limit_block_duration_seconds * 1000,
    )


def register_rate_limit_jobs(store: InMemoryRateLimitStore) -> None:
    """
    Register the periodic sweep of expired in-memory records.

    Only needed for the in-memory store; Redis expires keys itself.
    """

    async def sweep_expired_records() -> None:
        removed = store.sweep(now_ms())
        logger.info(f"Rate limit sweep removed {removed} expired records ({len(store)} remain)")

    register_job(
        job_id=JOB_ID_SWEEP,
        func=sweep_expired_records,
        trigger=IntervalTrigger(seconds=settings.rate_limit_sweep_interval_seconds),
    )


__all__ = [
    "RATE_LIMITS",
    "RATE_LIMIT_RULES",
    "InMemoryRateLimitStore",
    "RateLimitConfig",
    "RateLimitRecord",
    "RateLimitResult",
    "RateLimitRule",
    "RateLimitStore",
    "RateLimiter",
    "RedisRateLimitStore",
    "config_for",
    "create_rate_limiter",
    "register_rate_limit_jobs",
]
