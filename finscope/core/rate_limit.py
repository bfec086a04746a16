"""Simple in-memory rate limiting utilities."""
from __future__ import annotations

import asyncio
import time
from collections import defaultdict, deque
from typing import Deque, DefaultDict

from fastapi import HTTPException, Request, status

from finscope.core.config import settings
from finscope.core.cookies import SESSION_COOKIE_NAME


class RateLimiter:
    """Provide in-memory rate limiting with asyncio locking."""

    def __init__(self) -> None:
        self._attempts: DefaultDict[str, Deque[float]] = defaultdict(deque)
        self._lock = asyncio.Lock()

    async def is_allowed(self, key: str, max_requests: int, window_seconds: int) -> bool:
        """Return True when the request should be allowed for the key."""
        async with self._lock:
            now = time.time()
            window_start = now - window_seconds
            bucket = self._attempts[key]

            while bucket and bucket[0] < window_start:
                bucket.popleft()

            if len(bucket) >= max_requests:
                return False

            bucket.append(now)
            return True

    def reset(self) -> None:
        self._attempts.clear()


rate_limiter = RateLimiter()


async def enforce_ai_rate_limit(request: Request) -> None:
    """Throttle endpoints that spend AI gateway credits, per session or client."""
    identity = request.cookies.get(SESSION_COOKIE_NAME) or (
        request.client.host if request.client else "unknown"
    )
    allowed = await rate_limiter.is_allowed(
        f"ai:{identity}",
        settings.AI_RATE_LIMIT_MAX,
        settings.AI_RATE_LIMIT_WINDOW_SECONDS,
    )
    if not allowed:
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Too many requests. Please try again later.",
        )
