from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_PATH = Path(__file__).resolve().parent.parent / ".env.local"


class Settings(BaseSettings):
    # Environment settings
    environment: str = "development"
    debug: bool = False
    LOG_LEVEL: str = "INFO"

    # Supabase settings
    SUPABASE_URL: str
    SUPABASE_JWKS_URL: str | None = None
    SUPABASE_DB_URL: str

    # Shared secret sent by the platform cron as x-cron-secret
    CRON_SECRET: str | None = None

    # =================================================================
    # DATABASE POOL SETTINGS
    # =================================================================
    DB_POOL_MIN_SIZE: int = 3
    DB_POOL_MAX_SIZE: int = 12
    DB_POOL_TIMEOUT: float = 30.0
    DB_POOL_MAX_IDLE: float = 600.0  # 10 minutes
    DB_POOL_MAX_LIFETIME: float = 3600.0  # 1 hour

    # =================================================================
    # QUESTION GENERATION SETTINGS
    # =================================================================
    QUESTION_TOP_K: int = 5
    QUESTION_LOOKBACK_DAYS: int = 14
    QUESTION_MIN_ENTRIES: int = 3
    QUESTION_MIN_COMPLETED: int = 3
    QUESTION_DIVERSITY_ENABLED: bool = False
    ACTIVITY_WINDOW_DAYS: int = 30

    # =================================================================
    # WEEKLY BATCH SETTINGS
    # =================================================================
    BATCH_MAX_CONCURRENCY: int = 8  # keep below DB_POOL_MAX_SIZE
    BATCH_USER_TIMEOUT_SECONDS: float = 30.0
    BATCH_DEADLINE_SECONDS: float = 300.0
    WEEKLY_JOB_INTERVAL_HOURS: int = 168

    model_config = SettingsConfigDict(
        env_file=str(ENV_PATH),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # derive sensible defaults if not provided
    def jwks_url(self) -> str:
        if self.SUPABASE_JWKS_URL:
            return self.SUPABASE_JWKS_URL
        base = self.SUPABASE_URL.rstrip("/")
        return f"{base}/auth/v1/.well-known/jwks.json"

    def get_db_pool_config(self) -> dict:
        """
        Get database pool configuration.
        Adjust environment-specific settings based on self.environment.
        """
        config = {
            "min_size": self.DB_POOL_MIN_SIZE,
            "max_size": self.DB_POOL_MAX_SIZE,
            "timeout": self.DB_POOL_TIMEOUT,
            "max_idle": self.DB_POOL_MAX_IDLE,
            "max_lifetime": self.DB_POOL_MAX_LIFETIME,
        }

        if self.environment == "development":
            config.update(
                {
                    "min_size": 2,
                    "max_size": 8,
                    "timeout": 15.0,
                }
            )

        return config

    def get_batch_concurrency(self) -> int:
        """
        Worker pool size for the weekly batch.

        Each worker holds at most one pooled connection at a time, so the
        pool's max size is a hard ceiling.
        """
        pool_max = self.get_db_pool_config()["max_size"]
        return max(1, min(self.BATCH_MAX_CONCURRENCY, pool_max))


settings = Settings()
