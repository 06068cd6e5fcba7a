"""
Environment-aware configuration.
Signing secrets, token lifetimes, session ceiling, rate-limit window
and discovery constants. The database URL is read by DBStorage.
"""
import os
from dotenv import load_dotenv
from datetime import timedelta

load_dotenv()  # Read .env if present


def _seconds(name: str, default: int) -> timedelta:
    return timedelta(seconds=int(os.getenv(name, str(default))))


class BaseConfig:
    SECRET_KEY = os.getenv("FLASK_SECRET_KEY", "dev-flask-secret")  # Flask's own signing key
    DEBUG = False
    TESTING = False
    # CORS: in dev we usually allow '*', in prod supply a comma-separated list in env
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*")
    APP_ENV = os.getenv("APP_ENV", "dev")

    # JWT: two distinct secrets, one per token purpose
    ACCESS_TOKEN_SECRET = os.getenv("ACCESS_TOKEN_SECRET", "dev-access-secret-change-me")
    REFRESH_TOKEN_SECRET = os.getenv("REFRESH_TOKEN_SECRET", "dev-refresh-secret-change-me")
    JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
    JWT_ISSUER = os.getenv("JWT_ISSUER", "auth-discovery-api")
    ACCESS_TOKEN_EXPIRES = _seconds("ACCESS_TOKEN_EXPIRES_SECONDS", 24 * 60 * 60)
    REFRESH_TOKEN_EXPIRES = _seconds("REFRESH_TOKEN_EXPIRES_SECONDS", 10 * 24 * 60 * 60)

    SESSION_MAX_AGE = _seconds("SESSION_MAX_AGE_SECONDS", 24 * 60 * 60)
    COOKIE_SECURE = False

    RATE_LIMIT_MAX_REQUESTS = int(os.getenv("RATE_LIMIT_MAX_REQUESTS", "10"))
    RATE_LIMIT_WINDOW = _seconds("RATE_LIMIT_WINDOW_SECONDS", 15 * 60)

    # Discovery gate
    MAINTENANCE_CODE = os.getenv("MAINTENANCE_CODE", "DIAG_7834")
    DISCOVERY_TIMEZONE = os.getenv("DISCOVERY_TIMEZONE", "UTC")
    DISCOVERY_SECRET_KEY = os.getenv("SECRET_KEY", "your-super-secret-key-12345")

    # Vault placeholders
    ENCRYPTION_KEY = os.getenv("ENCRYPTION_KEY", "default-encryption-key-256bit")
    HMAC_SECRET = os.getenv("HMAC_SECRET", "default-hmac-secret-key")
    DATABASE_URL = os.getenv("DATABASE_URL")


class DevelopmentConfig(BaseConfig):
    DEBUG = True


class TestingConfig(BaseConfig):
    TESTING = True
    ACCESS_TOKEN_SECRET = "test-access-secret"
    REFRESH_TOKEN_SECRET = "test-refresh-secret"
    DISCOVERY_SECRET_KEY = "test-final-secret"


class ProductionConfig(BaseConfig):
    DEBUG = False
    COOKIE_SECURE = True


def get_config(name: str | None):
    """
    Select config class.
    - If name is provided, choose by name.
    - Else choose based on APP_ENV (dev/test/prod).
    """
    if name:
        name = name.lower()
    env = (name or os.getenv("APP_ENV", "dev")).lower()
    if env in ["prod", "production"]:
        return ProductionConfig
    if env in ["test", "testing"]:
        return TestingConfig
    return DevelopmentConfig
