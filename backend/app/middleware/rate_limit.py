"""Redis-based rate limiting middleware."""
import hashlib
import os
import time
import logging
from typing import Optional, Tuple

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse
import redis

logger = logging.getLogger(__name__)

REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/0")
GLOBAL_LIMIT = 60       # requests per minute per user
MATCH_LIMIT = 20        # requests per minute for match endpoints
ANON_LIMIT = 10         # requests per minute for anonymous
WINDOW_SECONDS = 60

MATCH_PATH_PREFIX = "/api/preferences/"
MATCH_PATH_SUFFIX = "/matches"


def is_match_path(path: str) -> bool:
    return path.startswith(MATCH_PATH_PREFIX) and path.endswith(MATCH_PATH_SUFFIX)


def resolve_identity(request: Request) -> Tuple[str, int]:
    """Bucket identity and per-minute limit for a request.

    Bearer tokens are digested so buckets agree across worker processes.
    Match requests count in their own bucket with the stricter limit.
    """
    auth = request.headers.get("authorization", "")
    if auth.startswith("Bearer "):
        digest = hashlib.sha256(auth.encode()).hexdigest()[:16]
        identity = f"user:{digest}"
        limit = GLOBAL_LIMIT
    else:
        identity = f"anon:{request.client.host if request.client else 'unknown'}"
        limit = ANON_LIMIT

    if is_match_path(request.url.path):
        identity += ":match"
        limit = min(limit, MATCH_LIMIT)
    return identity, limit


def bucket_key(identity: str, now: Optional[float] = None) -> str:
    window = int(now if now is not None else time.time()) // WINDOW_SECONDS
    return f"ratelimit:{identity}:{window}"


class RateLimitMiddleware(BaseHTTPMiddleware):
    def __init__(self, app):
        super().__init__(app)
        try:
            self.redis = redis.from_url(REDIS_URL)
        except Exception as e:
            logger.warning(f"Rate limiting disabled, Redis unavailable: {e}")
            self.redis = None

    async def dispatch(self, request: Request, call_next):
        if not self.redis or os.getenv("TESTING"):
            return await call_next(request)

        identity, limit = resolve_identity(request)
        key = bucket_key(identity)
        try:
            current = self.redis.incr(key)
            if current == 1:
                self.redis.expire(key, WINDOW_SECONDS * 2)
            if current > limit:
                logger.info(f"Rate limit hit for {identity} on {request.url.path}")
                return JSONResponse(
                    status_code=429,
                    content={"detail": "Rate limit exceeded. Please slow down."},
                    headers={"Retry-After": str(WINDOW_SECONDS)},
                )
        except Exception as e:
            logger.warning(f"Rate limit check failed: {e}")
            # Fail open

        return await call_next(request)
