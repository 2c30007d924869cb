"""
Login security utility for tracking and limiting attempts per client address.

State is in memory and per process; each limiter counts every attempt in a
fixed window that starts at the first attempt.
"""
import logging
import math
import time
from threading import Lock

from flask import current_app, request

from steelbuckle.errors import RateLimitError

logger = logging.getLogger(__name__)

# (max_attempts, window_seconds) per protected action
LOGIN_LIMIT = (5, 15 * 60)
CHECK_USERNAME_LIMIT = (10, 15 * 60)
RESET_PASSWORD_LIMIT = (3, 60 * 60)


class RateLimitResult:
    __slots__ = ("limited", "remaining", "retry_after")

    def __init__(self, limited, remaining, retry_after):
        self.limited = limited
        self.remaining = remaining
        self.retry_after = retry_after


class RateLimiter:
    def __init__(self, max_attempts, window_seconds, clock=time.time):
        self.max_attempts = max_attempts
        self.window_seconds = window_seconds
        self._clock = clock
        self._attempts = {}  # address -> {'count': int, 'window_start': float}
        self._lock = Lock()

    def _cleanup_expired(self, now):
        expired = [
            address
            for address, data in self._attempts.items()
            if now - data["window_start"] >= self.window_seconds
        ]
        for address in expired:
            del self._attempts[address]

    def hit(self, address):
        """Record one attempt from `address` and report whether it is over the limit.

        Returns:
            RateLimitResult with `limited`, `remaining` attempts and
            `retry_after` seconds until the window resets.
        """
        address = address or "unknown"
        with self._lock:
            now = self._clock()
            self._cleanup_expired(now)

            data = self._attempts.setdefault(address, {"count": 0, "window_start": now})
            data["count"] += 1

            retry_after = max(0, math.ceil(data["window_start"] + self.window_seconds - now))
            if data["count"] > self.max_attempts:
                return RateLimitResult(True, 0, retry_after)
            return RateLimitResult(False, self.max_attempts - data["count"], retry_after)

    def reset(self, address=None):
        with self._lock:
            if address is None:
                self._attempts.clear()
            else:
                self._attempts.pop(address, None)


def create_rate_limiters(clock=time.time):
    return {
        "login": RateLimiter(*LOGIN_LIMIT, clock=clock),
        "check_username": RateLimiter(*CHECK_USERNAME_LIMIT, clock=clock),
        "reset_password": RateLimiter(*RESET_PASSWORD_LIMIT, clock=clock),
    }


def client_ip():
    """Client address. ProxyFix has already replaced the peer with the proxy-appended X-Forwarded-For hop."""
    return request.remote_addr or "unknown"


def enforce_rate_limit(name, message="Too many attempts. Please try again later."):
    """Count this request against the named limiter; raise RateLimitError when over."""
    limiter = current_app.extensions["rate_limiters"][name]
    address = client_ip()
    result = limiter.hit(address)
    if result.limited:
        logger.warning("Rate limit %s exceeded for %s", name, address)
        raise RateLimitError(message, retry_after=result.retry_after)
    return result
