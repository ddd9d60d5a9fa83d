from pydantic_settings import BaseSettings, SettingsConfigDict

from pathlib import Path


class Settings(BaseSettings):
    APP_ENV: str = "dev"
    CORS_ORIGINS: str = "http://localhost:5173"
    DATA_DIR: Path = Path("data")
    LOG_LEVEL: str = "INFO"

    # remote page supplier
    API_URL: str = "http://localhost:5000"
    REMOTE_PAGE_PATH: str = "/api/csv-data"
    REMOTE_TIMEOUT: float = 10.0

    # uploads
    MAX_UPLOAD_BYTES: int = 10 * 1024 * 1024
    SAMPLE_ROWS: int = 50

    # view defaults
    DEFAULT_PAGE_SIZE: int = 10
    FILTER_CHOICES_MAX: int = 5
    WIDTH_SCALE: int = 10
    WIDTH_MIN: int = 100
    WIDTH_MAX: int = 300
    EXPORT_FILENAME: str = "Filtered_Data.xlsx"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


settings = Settings()
settings.DATA_DIR.mkdir(parents=True, exist_ok=True)
