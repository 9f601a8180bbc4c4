"""Application configuration loaded from environment variables."""

from functools import lru_cache
from typing import Literal

from pydantic import SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Allowed URL schemes for STORE_URL (module-level so validators can use it).
VALID_STORE_URL_PREFIXES = (
    "sqlite://",
    "sqlite+pysqlite://",
    "postgresql://",
    "postgresql+psycopg2://",
    "postgres://",
)


def _is_http_url(value: str) -> bool:
    s = value.strip().lower()
    return s.startswith("http://") or s.startswith("https://")


class Settings(BaseSettings):
    """Validated application settings from env and optional .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    APP_ENV: Literal["dev", "prod"] = "dev"
    DEBUG: bool = False
    API_V1_PREFIX: str = "/api/v1"

    # Local durable store (fallback authority). SQLite file by default.
    STORE_URL: str = "sqlite:///./wc_helper.db"
    STORAGE_KEY_PREFIX: str = "wc_"

    # Remote database service (preferred auth path when reachable)
    REMOTE_BASE_URL: str = "http://localhost:3001"
    REMOTE_AUTH_PATH: str = "/api/postgres/auth/login"
    REMOTE_AUTH_TIMEOUT_SEC: float = 10.0

    # Health probe: endpoints are tried in order within one deadline
    HEALTH_ENDPOINTS: list[str] = ["http://localhost:3001/api/postgres/health"]
    HEALTH_TIMEOUT_MS: int = 5000
    HEALTH_SUCCESS_MARKER: str = "successful"

    # Periodic background probing (optional)
    MONITOR_ENABLED: bool = False
    MONITOR_INTERVAL_SEC: float = 30.0

    # Seeded only when the local credential store is empty. Documented, not secret.
    DEFAULT_ADMIN_USERNAME: str = "admin@demo.com"
    DEFAULT_ADMIN_PASSWORD: SecretStr = SecretStr("Passw0rd!")
    DEFAULT_TIMEZONE: str = "Asia/Kuala_Lumpur"

    # Bearer tokens for the HTTP API (no expiry; sessions end on logout only)
    JWT_SECRET: SecretStr = SecretStr("change-me-in-production")
    JWT_ALGORITHM: str = "HS256"
    # When False, get_current_session returns the active session without a bearer token.
    AUTH_ENABLED: bool = True

    @field_validator("STORE_URL")
    @classmethod
    def validate_store_url(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("STORE_URL must be set and non-empty")
        if not any(v.strip().startswith(prefix) for prefix in VALID_STORE_URL_PREFIXES):
            raise ValueError(
                "STORE_URL must be a SQLite or PostgreSQL URL (e.g. sqlite:///./wc_helper.db)"
            )
        return v.strip()

    @field_validator("REMOTE_BASE_URL")
    @classmethod
    def validate_remote_base_url(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("REMOTE_BASE_URL must be set and non-empty")
        if not _is_http_url(v):
            raise ValueError(
                "REMOTE_BASE_URL must use http or https (e.g. http://localhost:3001)"
            )
        return v.strip().rstrip("/")

    @field_validator("REMOTE_AUTH_PATH")
    @classmethod
    def validate_remote_auth_path(cls, v: str) -> str:
        if not v or not v.strip().startswith("/"):
            raise ValueError("REMOTE_AUTH_PATH must start with '/'")
        return v.strip()

    @field_validator("REMOTE_AUTH_TIMEOUT_SEC")
    @classmethod
    def validate_remote_auth_timeout(cls, v: float) -> float:
        if v <= 0 or v > 120:
            raise ValueError(
                "REMOTE_AUTH_TIMEOUT_SEC must be greater than 0 and at most 120"
            )
        return v

    @field_validator("HEALTH_ENDPOINTS")
    @classmethod
    def validate_health_endpoints(cls, v: list[str]) -> list[str]:
        endpoints = [e.strip() for e in v if e and e.strip()]
        if not endpoints:
            raise ValueError("HEALTH_ENDPOINTS must contain at least one URL")
        for endpoint in endpoints:
            if not _is_http_url(endpoint):
                raise ValueError(
                    f"HEALTH_ENDPOINTS entries must use http or https (got {endpoint!r})"
                )
        return endpoints

    @field_validator("HEALTH_TIMEOUT_MS")
    @classmethod
    def validate_health_timeout(cls, v: int) -> int:
        if v <= 0 or v > 60000:
            raise ValueError(
                "HEALTH_TIMEOUT_MS must be greater than 0 and at most 60000"
            )
        return v

    @field_validator("HEALTH_SUCCESS_MARKER")
    @classmethod
    def validate_health_success_marker(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("HEALTH_SUCCESS_MARKER must be set and non-empty")
        return v.strip()

    @field_validator("MONITOR_INTERVAL_SEC")
    @classmethod
    def validate_monitor_interval(cls, v: float) -> float:
        if v < 1 or v > 3600:
            raise ValueError("MONITOR_INTERVAL_SEC must be between 1 and 3600")
        return v

    @field_validator("DEFAULT_ADMIN_USERNAME")
    @classmethod
    def validate_default_admin_username(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("DEFAULT_ADMIN_USERNAME must be set and non-empty")
        return v.strip()

    @field_validator("DEFAULT_ADMIN_PASSWORD", "JWT_SECRET")
    @classmethod
    def validate_non_empty_secret(cls, v: SecretStr) -> SecretStr:
        if not v.get_secret_value() or not v.get_secret_value().strip():
            raise ValueError("secret settings must be set and non-empty")
        return v

    @field_validator("JWT_ALGORITHM")
    @classmethod
    def validate_jwt_algorithm(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("JWT_ALGORITHM must be set and non-empty")
        return v.strip()


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance (safe to call from dependencies)."""
    return Settings()


settings = get_settings()
