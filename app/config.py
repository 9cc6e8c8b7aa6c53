import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()


@dataclass(frozen=True)
class Settings:
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./hrms_performance.db")
    db_pool_size: int = int(os.getenv("DB_POOL_SIZE", "15"))
    db_max_overflow: int = int(os.getenv("DB_MAX_OVERFLOW", "20"))
    db_pool_timeout: int = int(os.getenv("DB_POOL_TIMEOUT", "30"))
    db_pool_recycle: int = int(os.getenv("DB_POOL_RECYCLE", "1800"))
    # Create tables on startup (local development without migrations)
    db_auto_create: bool = os.getenv("DB_AUTO_CREATE", "").lower() in {"1", "true", "yes", "on"}

    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    # Performance scoring
    performance_history_months: int = int(os.getenv("PERFORMANCE_HISTORY_MONTHS", "6"))
    performance_max_workers: int = int(os.getenv("PERFORMANCE_MAX_WORKERS", "1"))


settings = Settings()
