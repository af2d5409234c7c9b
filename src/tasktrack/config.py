"""Application configuration via environment variables.

Uses pydantic-settings to load config from env vars with TASKTRACK_ prefix.
No YAML files, no file-based config: just env vars (12-factor app style).
"""

from pydantic import model_validator
from pydantic_settings import BaseSettings

_DEFAULT_JWT_SECRET = "change-me-in-production"


class Settings(BaseSettings):
    """All app configuration. Set via TASKTRACK_* env vars."""

    # Database
    database_url: str = "sqlite+aiosqlite:///./tasktrack.db"

    # Auth
    jwt_secret: str = _DEFAULT_JWT_SECRET
    jwt_algorithm: str = "HS256"
    access_token_expire_days: int = 7
    bcrypt_rounds: int = 12  # 4 is the bcrypt minimum; tests use it

    # Server
    environment: str = "development"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 3000

    # Logging
    log_level: str = "INFO"
    log_json: bool = False

    # CORS
    cors_origins: list[str] = [
        "http://localhost:5173",
        "http://localhost:5174",
    ]

    model_config = {"env_prefix": "TASKTRACK_"}

    @model_validator(mode="after")
    def validate_production_settings(self):
        """Ensure sensitive defaults are changed outside development and tests."""
        if (
            self.environment not in ("development", "test")
            and self.jwt_secret == _DEFAULT_JWT_SECRET
        ):
            raise ValueError(
                "TASKTRACK_JWT_SECRET must be set to a secure value in "
                "non-development environments. Generate one with: "
                'python -c "import secrets; print(secrets.token_urlsafe(32))"'
            )
        return self


# Singleton: import this everywhere
settings = Settings()
