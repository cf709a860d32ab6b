# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import time
from collections import defaultdict, deque
from collections.abc import Callable
from dataclasses import dataclass
from functools import wraps
from threading import Lock

from flask import Request, current_app, request

from cryptodash.shared.errors import RateLimitedError
from cryptodash.shared.logging import logger

_EXTENSION_KEY = "cryptodash.rate_limiters"


@dataclass
class Bucket:
    timestamps: deque[float]


class InMemoryRateLimiter:
    def __init__(self, limit: int, window_seconds: float) -> None:
        self._limit = max(1, int(limit))
        self._window = max(0.1, float(window_seconds))
        self._lock = Lock()
        self._buckets: dict[str, Bucket] = defaultdict(lambda: Bucket(deque(maxlen=self._limit)))

    def allow(self, key: str) -> bool:
        now = time.monotonic()
        with self._lock:
            bucket = self._buckets[key]
            # Drop old
            while bucket.timestamps and (now - bucket.timestamps[0]) > self._window:
                bucket.timestamps.popleft()
            if len(bucket.timestamps) >= self._limit:
                return False
            bucket.timestamps.append(now)
            return True


def _client_key(req: Request) -> str:
    forwarded = req.headers.get("X-Forwarded-For", "").split(",")[0].strip()
    return forwarded or (req.remote_addr or "unknown")


def _limiter_for(name: str, limit: int | None, window_seconds: float | None) -> InMemoryRateLimiter:
    limiters: dict[str, InMemoryRateLimiter] = current_app.extensions.setdefault(_EXTENSION_KEY, {})
    limiter = limiters.get(name)
    if limiter is None:
        limiter = InMemoryRateLimiter(
            limit or current_app.config["RATE_LIMIT_REQUESTS"],
            window_seconds or current_app.config["RATE_LIMIT_WINDOW"],
        )
        limiters[name] = limiter
    return limiter


def rate_limit(limit: int | None = None, window_seconds: float | None = None):
    """Per-app, per-client request budget for a view.

    Limits come from the decorator arguments or the app's ``RATE_LIMIT_*``
    config; ``RATE_LIMIT_ENABLED`` switches the check off entirely.
    """

    def decorator(f: Callable):
        @wraps(f)
        def wrapper(*args, **kwargs):
            if not current_app.config.get("RATE_LIMIT_ENABLED", True):
                return f(*args, **kwargs)
            limiter = _limiter_for(f.__qualname__, limit, window_seconds)
            key = f"{request.path}:{_client_key(request)}"
            if not limiter.allow(key):
                logger.warning(f"rate_limit: refused {request.method} {request.path} key={key}")
                raise RateLimitedError()
            return f(*args, **kwargs)

        return wrapper

    return decorator


__all__ = ["InMemoryRateLimiter", "rate_limit"]
