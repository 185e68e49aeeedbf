# app/core/config.py
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration, read from the environment / .env."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    PROJECT_NAME: str = "Guardianship Forms Backend"
    VERSION: str = "0.1.0"
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: List[str] = ["*"]

    DATABASE_URL: str = "sqlite:///./guardianship.db"

    # completion heuristic: answered fields over the full known inventory
    TOTAL_EXPECTED_FIELDS: int = 95

    # auto-save
    AUTOSAVE_DEBOUNCE_MS: int = 2000
    AUTOSAVE_RETRY_MS: int = 5000
    # editing sessions untouched this long are flushed and dropped
    AUTOSAVE_SESSION_IDLE_SECONDS: int = 1800

    # rendering
    PDF_RENDERER_ENABLED: bool = True
    TEMPLATES_DIR: Optional[str] = None
    DEFAULT_STATE: str = "CA"
    DEFAULT_COUNTY: str = "LOS ANGELES"
    COURT_NAME: str = "SUPERIOR COURT OF CALIFORNIA"

    # optional archive of generated forms
    S3_BUCKET: Optional[str] = None
    S3_ENDPOINT: Optional[str] = None
    S3_ACCESS_KEY: Optional[str] = None
    S3_SECRET_KEY: Optional[str] = None
    S3_PREFIX: str = "generated"


settings = Settings()
