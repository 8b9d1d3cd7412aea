from datetime import date

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    # Record store
    DATABASE_URL: str = "sqlite+aiosqlite:///./sowcal.db"
    TASKS_COLLECTION: str = "tasks"
    STORE_TIMEOUT_SECONDS: float = 10.0

    # Redis (frost estimate cache)
    REDIS_URL: str = "redis://redis:6379/0"
    FROST_CACHE_TTL_SECONDS: int = 30 * 24 * 60 * 60  # 30 days

    # External APIs
    OPEN_METEO_ARCHIVE_BASE_URL: str = "https://archive-api.open-meteo.com/v1"
    WEATHER_TIMEOUT_SECONDS: float = 15.0

    # Frost estimation
    FROST_THRESHOLD_C: float = 0.0
    FROST_SEASON_END_MONTH: int = 6
    FROST_SEASON_END_DAY: int = 30
    FROST_RETRY_YEARS: int = 1

    # Planner defaults
    DEFAULT_LAST_FROST: str = "2025-04-15"
    DEFAULT_WATERING_CADENCE_DAYS: int = 3
    DEFAULT_WATERING_WEEKS: int = 4

    # App
    LOG_LEVEL: str = "INFO"

    @property
    def default_last_frost(self) -> date:
        return date.fromisoformat(self.DEFAULT_LAST_FROST)


settings = Settings()
