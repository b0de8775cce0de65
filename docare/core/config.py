# docare/core/config.py
import os
from functools import lru_cache
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore", populate_by_name=True)

    # Application Settings
    APP_NAME: str = "DoCare Health API"
    APP_VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"
    DEBUG: bool = False
    DOCS_ENABLED: bool = True
    API_PREFIX: str = "/api/v1"

    # Server Settings
    HOST: str = "0.0.0.0"
    PORT: int = int(os.environ.get("PORT", 8000))
    WORKERS: int = 1

    # Database Settings
    DATABASE_URL: str = "sqlite:///./docare.db"
    DATABASE_ECHO: bool = False

    # Token Settings
    SECRET_KEY: str = Field(default="change-me-in-prod", alias="JWT_SECRET_KEY")
    REFRESH_SECRET_KEY: str = Field(default="change-me-in-prod-refresh", alias="JWT_REFRESH_SECRET_KEY")
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 15
    REFRESH_TOKEN_EXPIRE_DAYS: int = 7
    JWT_ISSUER: str = "docare-health"
    JWT_AUDIENCE: str = "docare-api"

    # Password hashing and lockout
    BCRYPT_ROUNDS: int = 12
    MAX_FAILED_LOGIN_ATTEMPTS: int = 5
    ACCOUNT_LOCKOUT_MINUTES: int = 30

    # Field encryption key, 64 hex characters (AES-256)
    ENCRYPTION_KEY: Optional[str] = None

    # CORS Settings
    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:8080"
    ALLOWED_METHODS: str = "GET,POST,PUT,PATCH,DELETE,OPTIONS"
    ALLOWED_HEADERS: str = "*"
    CORS_ALLOW_CREDENTIALS: bool = True

    # Middleware settings
    MAX_REQUEST_SIZE: int = 10 * 1024 * 1024  # 10MB
    GZIP_MIN_SIZE: int = 500

    # Logging Settings
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    LOG_FILE: Optional[str] = None
    LOG_MAX_BYTES: int = 10 * 1024 * 1024
    LOG_BACKUP_COUNT: int = 5

    # Rate Limiting
    RATE_LIMIT_WINDOW_SEC: int = 900
    RATE_LIMIT_MAX_REQUESTS: int = 100
    AUTH_RATE_LIMIT_WINDOW_SEC: int = 900
    AUTH_RATE_LIMIT_MAX_REQUESTS: int = 5
    REDIS_URL: Optional[str] = None

    # Realtime
    ENABLE_WEBSOCKET: bool = True

    # Platform defaults exposed to administrators
    SYMPTOM_CHECKER_EMERGENCY_THRESHOLD: int = 8
    DEFAULT_APPOINTMENT_DURATION_MINUTES: int = 30
    MAX_APPOINTMENTS_PER_DAY: int = 16
    CLINIC_OPEN_HOUR: int = 9
    CLINIC_CLOSE_HOUR: int = 17
    REQUIRE_MFA_FOR_PROVIDERS: bool = False
    SESSION_TIMEOUT_MINUTES: int = 15

    # Helper methods for list envs
    def _split_csv(self, value: str) -> List[str]:
        if value is None:
            return []
        value = value.strip()
        if value == "":
            return []
        return [item.strip() for item in value.split(",")]

    @property
    def cors_origins_list(self) -> List[str]:
        return self._split_csv(self.CORS_ORIGINS)

    @property
    def allowed_methods_list(self) -> List[str]:
        return self._split_csv(self.ALLOWED_METHODS)

    @property
    def allowed_headers_list(self) -> List[str]:
        return self._split_csv(self.ALLOWED_HEADERS)

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"


@lru_cache()
def get_settings() -> Settings:
    return Settings()


settings: Settings = get_settings()
