"""
Configuration module for the application.
All configuration values are read from environment variables.
Values can be placed in a .env file, which is loaded at startup.
"""
import os
import secrets
import warnings


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name, "")
    return value.lower() == "true" if value else default


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name, "")
    return int(value) if value else default


class Config:
    """Application configuration loaded from environment variables."""

    def __init__(self):
        """Initialize configuration from environment variables."""
        # Flask Configuration
        self.SECRET_KEY: str = os.getenv("SECRET_KEY", "")
        self.FLASK_ENV: str = os.getenv("FLASK_ENV", "")
        self.FLASK_DEBUG: bool = _env_bool("FLASK_DEBUG")
        self.LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

        # Generate a development SECRET_KEY if not set and in development mode
        if not self.SECRET_KEY and self.FLASK_ENV != "production":
            self.SECRET_KEY = secrets.token_urlsafe(32)
            warnings.warn(
                "SECRET_KEY not set. Generated a temporary key for development. "
                "Set SECRET_KEY in your .env file for production!",
                UserWarning
            )

        # Database Configuration
        self.DATABASE_URL: str = os.getenv("DATABASE_URL", "")
        self.DB_USER: str = os.getenv("DB_USER", "")
        self.DB_PASSWORD: str = os.getenv("DB_PASSWORD", "")
        self.DB_HOST: str = os.getenv("DB_HOST", "")
        self.DB_PORT: str = os.getenv("DB_PORT", "")
        self.DB_NAME: str = os.getenv("DB_NAME", "")

        # URL prefixes
        self.AUTH_API_PREFIX: str = os.getenv("AUTH_API_PREFIX", "/api/auth")
        self.QUIZ_URL_PREFIX: str = os.getenv("QUIZ_URL_PREFIX", "/quiz")

        # Base URL used to build shareable quiz links
        self.APP_BASE_URL: str = os.getenv("APP_BASE_URL", "http://localhost:5000")

        # Password Validation
        self.MIN_PASSWORD_LENGTH: int = _env_int("MIN_PASSWORD_LENGTH", 8)

        # Rate limits
        self.RATELIMIT_ENABLED: bool = _env_bool("RATELIMIT_ENABLED", True)
        self.LOGIN_RATE_LIMIT: int = _env_int("LOGIN_RATE_LIMIT", 10)
        self.LOGIN_RATE_WINDOW_SECONDS: int = _env_int("LOGIN_RATE_WINDOW_SECONDS", 60)
        self.SUBMIT_RATE_LIMIT: int = _env_int("SUBMIT_RATE_LIMIT", 20)
        self.SUBMIT_RATE_WINDOW_SECONDS: int = _env_int("SUBMIT_RATE_WINDOW_SECONDS", 60)

        # Success / failure messages
        self.MSG_REGISTER_SUCCESS: str = os.getenv("MSG_REGISTER_SUCCESS", "Registration successful")
        self.MSG_LOGIN_SUCCESS: str = os.getenv("MSG_LOGIN_SUCCESS", "Login successful")
        self.MSG_LOGOUT_SUCCESS: str = os.getenv("MSG_LOGOUT_SUCCESS", "You have been logged out")
        self.MSG_STORE_FAILURE: str = os.getenv(
            "MSG_STORE_FAILURE", "Something went wrong while saving. Please try again."
        )

        # Session Configuration
        self.SESSION_COOKIE_SECURE: bool = _env_bool("SESSION_COOKIE_SECURE")
        self.SESSION_COOKIE_HTTPONLY: bool = _env_bool("SESSION_COOKIE_HTTPONLY", True)
        self.SESSION_COOKIE_SAMESITE: str = os.getenv("SESSION_COOKIE_SAMESITE", "Lax")

        # SQLAlchemy Configuration
        self.SQLALCHEMY_TRACK_MODIFICATIONS: bool = False
        self.SQLALCHEMY_ECHO: bool = _env_bool("SQLALCHEMY_ECHO")

    @property
    def SQLALCHEMY_DATABASE_URI(self) -> str:
        """Database URI: DATABASE_URL if set, otherwise built from the DB_* variables."""
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return f"mysql+pymysql://{self.DB_USER}:{self.DB_PASSWORD}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"

    def validate(self) -> None:
        """
        Validate required configuration values.
        Only enforces SECRET_KEY in production environment.
        """
        if not self.SECRET_KEY:
            if self.FLASK_ENV == "production":
                raise ValueError(
                    "SECRET_KEY environment variable is required in production. "
                    "Set it in your .env file or environment variables."
                )


# Global config instance - will be re-initialized after load_dotenv()
config = Config()
