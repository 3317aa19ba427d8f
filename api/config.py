"""
Environment-aware configuration.
Signing secrets, token lifetimes, Google client credentials and the public
base URL are read once here and handed to the token issuer and the Google
client as explicit settings objects by create_app().
"""
import os
from dotenv import load_dotenv
from datetime import timedelta

load_dotenv()  # Read .env if present

DEV_ACCESS_SECRET = "dev-access-secret-change-me"
DEV_REFRESH_SECRET = "dev-refresh-secret-change-me"


class BaseConfig:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")  # Set a strong key in production
    DEBUG = False
    TESTING = False
    # CORS: in dev we usually allow '*', in prod supply a comma-separated list in env
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*")
    APP_ENV = os.getenv("APP_ENV", "dev")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///session-auth.db")
    SQLALCHEMY_ECHO = os.getenv("SQLALCHEMY_ECHO", "false").lower() in ("1", "true", "yes")

    # jwt configurations: access and refresh tokens are signed with different secrets
    ACCESS_SECRET_JWT = os.getenv("ACCESS_SECRET_JWT", DEV_ACCESS_SECRET)
    REFRESH_SECRET_JWT = os.getenv("REFRESH_SECRET_JWT", DEV_REFRESH_SECRET)
    JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
    JWT_ISSUER = os.getenv("JWT_ISSUER", "session-auth-api")
    ACCESS_TOKEN_EXPIRES = timedelta(seconds=int(os.getenv("ACCESS_TOKEN_EXPIRES_SECONDS", str(12 * 3600))))
    REFRESH_TOKEN_EXPIRES = timedelta(seconds=int(os.getenv("REFRESH_TOKEN_EXPIRES_SECONDS", str(7 * 86400))))

    # Google sign-in
    BASE_URL = os.getenv("BASE_URL", "http://localhost:8000")
    GOOGLE_CLIENT_ID = os.getenv("GOOGLE_CLIENT_ID", "")
    GOOGLE_CLIENT_SECRET = os.getenv("GOOGLE_CLIENT_SECRET", "")
    GOOGLE_CALLBACK_PATH = os.getenv("GOOGLE_CALLBACK_PATH", "/api/v1/auth/google-redirect")
    GOOGLE_HTTP_TIMEOUT = float(os.getenv("GOOGLE_HTTP_TIMEOUT", "30"))


class DevelopmentConfig(BaseConfig):
    DEBUG = True
    # In dev, propagate exceptions so our error handler has full context
    PROPAGATE_EXCEPTIONS = True
    LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")


class TestingConfig(BaseConfig):
    TESTING = True
    DATABASE_URL = os.getenv("TEST_DATABASE_URL", "sqlite:///session-auth-test.db")
    ACCESS_SECRET_JWT = "test-access-secret"
    REFRESH_SECRET_JWT = "test-refresh-secret"
    BASE_URL = "http://auth.test"
    GOOGLE_CLIENT_ID = "test-client-id"
    GOOGLE_CLIENT_SECRET = "test-client-secret"


class ProductionConfig(BaseConfig):
    DEBUG = False


def get_config(name: str | None):
    """
    Select config class.
    - If name is provided, choose by name.
    - Else choose based on APP_ENV (dev/test/prod).
    """
    env = (name or os.getenv("APP_ENV", "dev")).lower()
    if env in ["prod", "production"]:
        return ProductionConfig
    if env in ["test", "testing"]:
        return TestingConfig
    return DevelopmentConfig


def check_secrets(config) -> None:
    """Refuse to run production with missing, default or shared signing secrets."""
    if config.get("DEBUG") or config.get("TESTING"):
        return
    access = config.get("ACCESS_SECRET_JWT")
    refresh = config.get("REFRESH_SECRET_JWT")
    if not access or not refresh:
        raise RuntimeError("ACCESS_SECRET_JWT and REFRESH_SECRET_JWT must be set")
    if access == DEV_ACCESS_SECRET or refresh == DEV_REFRESH_SECRET:
        raise RuntimeError("JWT signing secrets are still set to development defaults")
    if access == refresh:
        raise RuntimeError("ACCESS_SECRET_JWT and REFRESH_SECRET_JWT must differ")
