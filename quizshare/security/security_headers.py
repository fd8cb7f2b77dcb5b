"""
Security headers module.

Adds security headers to every API response.
"""

from flask import current_app


class SecurityHeaders:
    """
    Security headers middleware.

    The API only serves JSON and CSV, so the content policy is locked down
    completely.
    """

    @staticmethod
    def init_app(app):
        """
        Initialize security headers for the Flask app.

        Args:
            app: Flask application instance
        """
        @app.after_request
        def add_security_headers(response):
            """Add security headers to all responses."""
            response.headers['Content-Security-Policy'] = (
                "default-src 'none'; frame-ancestors 'none'; base-uri 'none'"
            )
            response.headers['X-Content-Type-Options'] = 'nosniff'
            response.headers['X-Frame-Options'] = 'DENY'
            response.headers['Referrer-Policy'] = 'strict-origin-when-cross-origin'
            response.headers['Permissions-Policy'] = (
                "geolocation=(), "
                "microphone=(), "
                "camera=(), "
                "payment=(), "
                "usb=()"
            )

            # Strict-Transport-Security: Force HTTPS (only in production)
            if current_app.config.get('SESSION_COOKIE_SECURE', False):
                response.headers['Strict-Transport-Security'] = (
                    'max-age=31536000; includeSubDomains'
                )

            # Quiz results and drafts are per-user; never cache them
            if response.mimetype in ('application/json', 'text/csv'):
                response.cache_control.no_store = True

            return response
