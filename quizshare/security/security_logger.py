"""
Security event logging.

Failed and successful teacher logins, attempts to change someone else's quiz
and rate-limit hits are written to the application logger with a
``SECURITY:`` prefix so they can be filtered out of the regular log.
"""

from datetime import datetime

from flask import current_app, request


def _client_ip() -> str:
    return request.remote_addr or 'unknown'


class SecurityLogger:
    """Writes security events to ``current_app.logger``."""

    @staticmethod
    def _log(level: str, event: str, **fields):
        details = ', '.join(f"{key}={value}" for key, value in fields.items())
        getattr(current_app.logger, level)(
            f"SECURITY: {event} - {details}, ip={_client_ip()}, "
            f"at={datetime.utcnow().isoformat()}"
        )

    @staticmethod
    def log_failed_login(email: str, reason: str = "Invalid credentials"):
        SecurityLogger._log('warning', 'Failed login', email=email, reason=reason)

    @staticmethod
    def log_successful_login(user_id: int, email: str):
        SecurityLogger._log('info', 'Teacher signed in', user_id=user_id, email=email)

    @staticmethod
    def log_rate_limit_exceeded(identifier: str, endpoint: str):
        """
        Args:
            identifier: Rate limit bucket, e.g. ``ip:10.0.0.1:quiz.submit_quiz``
            endpoint: Request path that was refused
        """
        SecurityLogger._log('warning', 'Rate limit exceeded', bucket=identifier, path=endpoint)

    @staticmethod
    def log_unauthorized_access(resource: str, user_id: int = None):
        """A signed-in teacher tried to change a quiz they do not own."""
        SecurityLogger._log(
            'warning', 'Quiz write refused',
            resource=resource, user_id=user_id if user_id else 'anonymous',
        )
