from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env")

    app_name: str = "CardTracker"
    debug: bool = False
    log_level: str = "INFO"

    database_url: str = "sqlite+aiosqlite:///./cardtracker.db"
    db_pool_size: int = 5
    db_max_overflow: int = 10
    db_pool_recycle_seconds: int = 1800
    db_busy_timeout_seconds: float = 5.0

    # Runs the idempotent seeder from the app lifespan
    seed_on_startup: bool = False

    cors_origins: list[str] = ["*"]

    price_history_days: int = 30
    value_history_days: int = 90
    default_page_size: int = 50
    max_page_size: int = 200


settings = Settings()
