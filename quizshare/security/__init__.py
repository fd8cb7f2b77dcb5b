"""
Security helpers for the quiz API: per-route rate limits, response
headers and ``SECURITY:`` event logging.
"""

from .rate_limiter import RateLimiter, get_rate_limiter, rate_limit
from .security_headers import SecurityHeaders
from .security_logger import SecurityLogger
from .security_init import init_security

__all__ = [
    'RateLimiter',
    'get_rate_limiter',
    'rate_limit',
    'SecurityHeaders',
    'SecurityLogger',
    'init_security',
]
