"""Application configuration via environment variables.

Uses pydantic-settings to load config from env vars with DEEPTHOUGHTS_ prefix.
No YAML files, no file-based config — just env vars (12-factor app style).

Learn: database_url doubles as the storage selector. "memory://" keeps
every document in-process (handy for dev and tests); any SQLAlchemy async
URL switches to the SQL-backed document store.
"""

from pydantic import model_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """All app configuration. Set via DEEPTHOUGHTS_* env vars."""

    # Storage
    database_url: str = "memory://"

    # Redis (rate limiting only — optional)
    redis_url: str = "redis://localhost:6379/0"

    # Auth
    jwt_secret: str = "change-me-in-production"
    jwt_algorithm: str = "HS256"
    token_max_age_minutes: int = 120
    bcrypt_rounds: int = 12

    # Content limits
    max_text_length: int = 280

    # Server
    environment: str = "development"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 3001

    # CORS
    cors_origins: list[str] = [
        "http://localhost:3000",
    ]

    # Rate limiting
    rate_limit_rpm: int = 100  # requests per minute per IP
    rate_limit_auth_rpm: int = 10  # login / addUser

    model_config = {"env_prefix": "DEEPTHOUGHTS_"}

    @model_validator(mode="after")
    def validate_production_settings(self):
        """Ensure sensitive defaults are changed in non-development environments."""
        if (
            self.environment != "development"
            and self.jwt_secret == "change-me-in-production"
        ):
            raise ValueError(
                "DEEPTHOUGHTS_JWT_SECRET must be set to a secure value in "
                "non-development environments. Generate one with: "
                'python -c "import secrets; print(secrets.token_urlsafe(32))"'
            )
        return self


# Singleton — import this everywhere
settings = Settings()
