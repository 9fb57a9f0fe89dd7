# backend/booking_engine/config.py

from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parents[2]  # repository root


class Settings(BaseSettings):
    database_url: str = "sqlite:///./booking_engine.db"
    redis_url: Optional[str] = None

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"

    # Slots
    slot_step_minutes: int = 30
    horizon_days: int = Field(60, ge=1)

    # Reservations
    payments_enabled: bool = True
    pending_payment_ttl_minutes: int = Field(30, ge=1)
    reaper_interval_seconds: int = Field(60, ge=0)  # 0 = no in-process reaper
    lock_backend: Literal["memory", "redis"] = "memory"
    lock_timeout_seconds: float = 10.0
    lock_lease_seconds: float = 30.0
    lock_bucket_minutes: int = Field(24 * 60, ge=1)

    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env",
        extra="ignore",
    )

    @property
    def resolved_database_url(self) -> str:
        url = self.database_url
        if url.startswith("sqlite:///./"):
            # Relative SQLite paths are relative to the repository root
            relative_path = url.replace("sqlite:///./", "")
            absolute_path = BASE_DIR / relative_path
            return f"sqlite:///{absolute_path}"
        return url


@lru_cache
def get_settings() -> Settings:
    """Settings read once from the environment / .env, for app wiring only."""
    return Settings()
