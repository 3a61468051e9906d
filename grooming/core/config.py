# grooming/core/config.py
import os
from functools import lru_cache
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def split_csv(value: Optional[str]) -> List[str]:
    if not value or not value.strip():
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore", populate_by_name=True)

    APP_NAME: str = "Grooming Appointments API"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    DOCS_ENABLED: bool = True
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # Persistence
    DATABASE_URL: str = "sqlite:///./grooming.db"
    SEED_CATALOG: bool = True

    # JWT
    SECRET_KEY: str = Field(default="change-me-in-prod", alias="JWT_SECRET_KEY")
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(default=60 * 24, gt=0)

    # CORS, comma separated
    ALLOWED_ORIGINS: str = "*"
    ALLOWED_METHODS: str = "GET,POST,PUT,PATCH,DELETE,OPTIONS"
    ALLOWED_HEADERS: str = "*"
    CORS_ALLOW_CREDENTIALS: bool = True

    GZIP_MIN_SIZE: int = 500

    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    # Per client IP, shared through Redis when REDIS_URL is set
    RATE_LIMIT_PER_MINUTE: int = Field(default=60, gt=0)
    REDIS_URL: Optional[str] = None

    # Loyalty discount: DISCOUNT_PERCENT off once a customer has THRESHOLD completed visits
    LOYALTY_VISIT_THRESHOLD: int = Field(default=3, ge=0)
    LOYALTY_DISCOUNT_PERCENT: int = Field(default=10, ge=0, le=100)

    # Shown when an appointment's service type can no longer be resolved
    UNAVAILABLE_SERVICE_TYPE_NAME: str = "Unavailable"

    @property
    def allowed_origins_list(self) -> List[str]:
        return split_csv(self.ALLOWED_ORIGINS)

    @property
    def allowed_methods_list(self) -> List[str]:
        return split_csv(self.ALLOWED_METHODS)

    @property
    def allowed_headers_list(self) -> List[str]:
        return split_csv(self.ALLOWED_HEADERS)


@lru_cache()
def get_settings() -> Settings:
    s = Settings()
    # CORS_ORIGINS is accepted as an alternative name for ALLOWED_ORIGINS
    cors_env = os.environ.get("CORS_ORIGINS")
    if cors_env:
        s.ALLOWED_ORIGINS = cors_env
    return s


settings: Settings = get_settings()
