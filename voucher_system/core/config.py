from pydantic_settings import BaseSettings
from pydantic import Field, field_validator
from typing import List


class Settings(BaseSettings):
    # Project Info
    PROJECT_NAME: str = "Voucher System API"
    API_V1_STR: str = "/api/v1"

    # Database
    DATABASE_URL: str
    SQLITE_BUSY_TIMEOUT_SECONDS: float = 30.0

    # CORS
    BACKEND_CORS_ORIGINS: List[str] = [
        "http://localhost:3000",
    ]

    # Environment
    ENVIRONMENT: str = "development"

    DEBUG: bool = False

    # Monitoring (Optional - Add to .env for production)
    SENTRY_DSN: str = ""

    # Celery & Redis (Task Queue)
    REDIS_URL: str = "redis://localhost:6379/0"
    CELERY_BROKER_URL: str = "redis://localhost:6379/0"
    CELERY_RESULT_BACKEND: str = "redis://localhost:6379/0"

    # Claim protocol
    CLAIM_MAX_ATTEMPTS: int = Field(default=3, ge=1)
    CLAIM_RETRY_BACKOFF_SECONDS: float = Field(default=0.05, ge=0)
    CLAIM_RATE_LIMIT: str = "10/minute"

    @field_validator("ENVIRONMENT")
    @classmethod
    def normalize_environment(cls, value: str) -> str:
        return value.lower().strip()

    model_config = {
        "env_file": ".env",
        "case_sensitive": True,
        "extra": "ignore",
    }


settings = Settings()
