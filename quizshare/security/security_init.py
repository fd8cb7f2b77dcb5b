"""
Wires the security package into an application.

Rate limiting is applied per route with ``rate_limit``; everything that
applies to every response is installed here.
"""

from flask import Flask
from .security_headers import SecurityHeaders


def init_security(app: Flask):
    SecurityHeaders.init_app(app)
    app.logger.info(
        "Security headers installed; rate limiting %s",
        "enabled" if app.config.get("RATELIMIT_ENABLED", True) else "disabled",
    )
