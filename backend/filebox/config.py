"""Application configuration from environment variables."""
from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """All config comes from env vars or .env file. Read once at startup."""

    HOST: str = "0.0.0.0"
    PORT: int = 3000
    ENVIRONMENT: str = "development"  # "development" or "production"
    LOG_LEVEL: str = "INFO"

    # Storage
    UPLOAD_DIR: str = "./uploads"
    METADATA_FILENAME: str = "metadata.json"
    MAX_FILE_SIZE: int = 104857600  # 100MB
    MAX_FILES_PER_UPLOAD: int = 10

    # Built frontend, served from the same origin in production
    PUBLIC_DIR: str = "./public"

    # Dev-only CORS (frontend dev server at 5173)
    CORS_ORIGINS: str = "http://localhost:5173"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

    @property
    def metadata_path(self) -> Path:
        return Path(self.UPLOAD_DIR) / self.METADATA_FILENAME

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"


settings = Settings()
