from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator
from typing import Any, ClassVar
import json
from pathlib import Path
import os


class Settings(BaseSettings):
    API_V1_STR: str = "/api/v1"

    # JWT configuration (provide a fallback for local development)
    SECRET_KEY: str = "fallback_secret_for_dev_only"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30

    # Database URL
    # Use an absolute path so running the app from different directories
    # (e.g., repo root or backend/) always resolves the same DB file.
    BASE_DIR: ClassVar[Path] = Path(__file__).resolve().parents[2]
    SQLALCHEMY_DATABASE_URL: str = f"sqlite:///{BASE_DIR / 'marketplace.db'}"

    # Pool sizing for non-SQLite engines. DB_POOL_TIMEOUT bounds how long a
    # request waits for a connection before failing.
    DB_POOL_SIZE: int = 6
    DB_MAX_OVERFLOW: int = 6
    DB_POOL_TIMEOUT: float = 5.0
    DB_POOL_RECYCLE: int = 300
    SQLITE_BUSY_TIMEOUT_MS: int = 15000

    # CORS origins
    CORS_ORIGINS: list[str] = ["http://localhost:3000"]

    LOG_LEVEL: str = "INFO"
    ENABLE_CONSOLE_TRACING: bool = False
    OTEL_EXCLUDE_HEALTH: bool = True

    # Single currency; used for display strings only
    DEFAULT_CURRENCY: str = "INR"

    # Platform commission on completed bookings, in percent
    COMMISSION_RATE: float = 10.0

    # Wallet limits
    MAX_RECHARGE_AMOUNT: float = 10000.0

    # Legacy behaviour: when a contract worker has no contractor, attach the
    # first approved contractor at booking time. Off unless explicitly enabled.
    CONTRACTOR_FALLBACK_ENABLED: bool = False

    # Pagination
    DEFAULT_PAGE_SIZE: int = 20
    MAX_PAGE_SIZE: int = 100

    @field_validator("CORS_ORIGINS", mode="before")
    def split_origins(cls, v: Any) -> list[str]:
        """Parse comma-separated or JSON list of origins from environment."""
        if isinstance(v, str):
            try:
                parsed = json.loads(v)
                if isinstance(parsed, list):
                    return parsed
            except json.JSONDecodeError:
                pass
            return [s.strip() for s in v.split(",") if s.strip()]
        return v

    @field_validator("COMMISSION_RATE")
    def check_commission_rate(cls, v: float) -> float:
        if v < 0 or v > 100:
            raise ValueError("COMMISSION_RATE must be between 0 and 100")
        return v

    model_config = SettingsConfigDict(extra="ignore", case_sensitive=True)


def load_settings() -> "Settings":
    return Settings(_env_file=os.getenv("ENV_FILE", str(Path(__file__).resolve().parents[3] / ".env")))


settings = load_settings()
