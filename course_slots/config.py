# course_slots/config.py

from pathlib import Path
from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parents[1]


class Settings(BaseSettings):
    database_url: str
    redis_url: str

    # Capacity events (async inlet from the booking orchestrator)
    capacity_queue: str = "capacity:events"
    capacity_consumer_enabled: bool = True

    # Ledger contention policy
    ledger_lock_timeout_seconds: float = 5.0
    ledger_max_retries: int = 3
    ledger_backoff_base_seconds: float = 0.05

    max_generation_days: int = 366

    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env",
        extra="ignore",
    )

    @property
    def resolved_database_url(self) -> str:
        url = self.database_url
        if url.startswith("sqlite:///./"):
            # Relative SQLite path -> absolute, anchored at the project root
            relative_path = url.replace("sqlite:///./", "")
            absolute_path = BASE_DIR / relative_path
            return f"sqlite:///{absolute_path}"
        return url


settings = Settings()
