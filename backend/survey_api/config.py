"""Centralised, environment driven application settings."""

from pydantic_settings import BaseSettings
from typing import List
from pathlib import Path


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./surveys.db"
    SECRET_KEY: str = "change-me-to-a-random-secret-key"
    DEBUG: bool = True
    ENVIRONMENT: str = "development"
    ALLOWED_ORIGINS: List[str] = ["http://localhost:5173", "http://localhost:3001"]
    API_PREFIX: str = "/api"
    LOG_LEVEL: str = "INFO"

    # JWT
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 24 * 60
    VERIFY_TOKEN_EXPIRE_MINUTES: int = 24 * 60
    RESET_TOKEN_EXPIRE_MINUTES: int = 60

    # Base URL of the frontend used in verification and reset links
    APP_URL: str = "http://localhost:5173"

    # Public listings
    RECOMMENDED_SURVEY_LIMIT: int = 5

    @property
    def is_production(self) -> bool:
        return str(self.ENVIRONMENT or "").strip().lower() == "production"

    class Config:
        # backend/.env is loaded regardless of the working directory.
        env_file = str(Path(__file__).resolve().parents[1] / ".env")


settings = Settings()
