"""
Rate limiting for the login and quiz submission endpoints.

Request timestamps are kept in memory per bucket (client address plus
endpoint), so limits are per process.
"""

from collections import deque
from functools import wraps
import threading
import time

from flask import request, jsonify, current_app, make_response

from .security_logger import SecurityLogger


class RateLimiter:
    """
    Sliding window rate limiter.

    A bucket may hold at most ``max_requests`` timestamps younger than
    ``window_seconds``; a request that would exceed that is refused and not
    recorded.
    """

    def __init__(self, clock=time.time):
        self._buckets: dict[str, deque] = {}
        self._lock = threading.Lock()
        self._clock = clock

    def is_allowed(self, identifier: str, max_requests: int, window_seconds: int) -> tuple[bool, int]:
        """
        Record a request for ``identifier`` if the limit allows it.

        Returns:
            Tuple of (is_allowed, remaining_requests)
        """
        now = self._clock()
        cutoff = now - window_seconds

        with self._lock:
            bucket = self._buckets.setdefault(identifier, deque())
            while bucket and bucket[0] <= cutoff:
                bucket.popleft()

            if len(bucket) >= max_requests:
                return False, 0

            bucket.append(now)
            return True, max_requests - len(bucket)

    def reset(self, identifier: str = None):
        """Forget one bucket, or every bucket when no identifier is given."""
        with self._lock:
            if identifier is None:
                self._buckets.clear()
            else:
                self._buckets.pop(identifier, None)


# Shared by every rate limited route in the process
_rate_limiter = RateLimiter()


def get_rate_limiter() -> RateLimiter:
    return _rate_limiter


def _bucket_for_request() -> str:
    ip = request.remote_addr or 'unknown'
    return f"ip:{ip}:{request.endpoint}"


def rate_limit(max_requests: int = 10, window_seconds: int = 60,
               error_message: str = "Rate limit exceeded. Please try again later."):
    """
    Decorator to rate limit a route per client address.

    Disabled when the app's ``RATELIMIT_ENABLED`` setting is false.

    Example:
        @quiz_bp.route('/api/take/<quiz_id>/submit', methods=['POST'])
        @rate_limit(max_requests=20, window_seconds=60)
        def submit_quiz(quiz_id):
            ...
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if not current_app.config.get('RATELIMIT_ENABLED', True):
                return f(*args, **kwargs)

            identifier = _bucket_for_request()
            allowed, remaining = _rate_limiter.is_allowed(
                identifier, max_requests, window_seconds
            )

            if not allowed:
                SecurityLogger.log_rate_limit_exceeded(identifier, request.path)
                response = make_response(jsonify({
                    'success': False,
                    'error': error_message,
                    'retry_after': window_seconds
                }), 429)
                response.headers['Retry-After'] = str(window_seconds)
            else:
                response = make_response(f(*args, **kwargs))

            response.headers['X-RateLimit-Limit'] = str(max_requests)
            response.headers['X-RateLimit-Remaining'] = str(remaining)
            return response

        return decorated_function
    return decorator
