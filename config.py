from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    APP_NAME: str = "Personal Finance Tracker API"

    # development / production / test
    ENVIRONMENT: str = "development"

    # Database
    # For SQLite (default, no extra driver needed)
    DATABASE_URL: str = "sqlite:///./finance_tracker.db"

    # For PostgreSQL (requires psycopg2-binary)
    # DATABASE_URL: str = "postgresql://postgres:postgres@db:5432/finance_tracker"

    API_PREFIX: str = "/api"

    # Logging
    LOG_LEVEL: str = "INFO"

    # Pagination
    DEFAULT_PAGE_SIZE: int = 50
    MAX_PAGE_SIZE: int = 100

    # CORS
    ALLOWED_ORIGINS: List[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]

    class Config:
        env_file = ".env"

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.strip().lower() == "production"


settings = Settings()
