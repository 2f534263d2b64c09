"""Application configuration from environment variables."""
from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """All config comes from env vars or .env.backend file."""

    DATABASE_URL: str = "sqlite+aiosqlite:///./cloudshare.db"
    FILE_STORAGE_TYPE: str = "local"  # "local" or "memory"
    FILE_STORAGE_PATH: str = "./backend/uploads"
    PUBLIC_BASE_URL: str = "http://localhost:8721"
    API_PORT: int = 8721
    CORS_ORIGINS: str = "http://localhost:3000"
    LOG_LEVEL: str = "INFO"

    # Bearer token verification
    SECRET_KEY: str = "change-me"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    # Uploads
    MAX_UPLOAD_BYTES: int = 100 * 1024 * 1024
    STORAGE_TIMEOUT_SECONDS: float = 30.0

    # Share links
    SHARE_TOKEN_BYTES: int = 24  # 32 URL-safe characters
    SHARE_TOKEN_MAX_ATTEMPTS: int = 5

    class Config:
        env_file = ".env.backend"
        env_file_encoding = "utf-8"

    @property
    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]


@lru_cache
def get_settings() -> Settings:
    return Settings()
