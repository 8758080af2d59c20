from pydantic_settings import BaseSettings
from functools import lru_cache
from typing import Optional

class Settings(BaseSettings):
    # Left unset, the service starts without a database connection
    DATABASE_URL: Optional[str] = None
    HOST: str = "127.0.0.1"
    PORT: int = 8080
    LOG_LEVEL: str = "INFO"
    SERVICE_VERSION: str = "1.0.0"
    CORS_MAX_AGE: int = 3600

    class Config:
        env_file = ".env"

@lru_cache
def get_settings() -> Settings:
    return Settings()
