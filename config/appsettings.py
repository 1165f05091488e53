from typing import List, Optional
from pydantic_settings import BaseSettings

class AppSettings(BaseSettings):
    APP_NAME: str = "comment-tree"
    APP_VERSION: str = "0.1.0"
    APP_DESCRIPTION: str = "Threaded comments with search and pagination"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    DB_USERNAME: str = "postgres"
    DB_PASSWORD: str = "postgres"
    DB_HOST: str = "localhost"
    DB_PORT: int = 5432
    DB_NAME: str = "comments"
    DB_DRIVER: str = "asyncpg"
    # Full SQLAlchemy URL, wins over the DB_* parts (sqlite+aiosqlite:///... for local runs)
    DB_URL: Optional[str] = None
    DB_RECREATE: bool = False

    API_BASE_URL: str = "http://localhost:8000"
    API_TIMEOUT: float = 10.0
    CORS_ORIGINS: List[str] = ["http://localhost:5173"]

    PAGE_SIZE: int = 10
    REPLIES_INLINE_LIMIT: int = 4

    class Config:
        env_file = ".env"
        extra = "ignore"

    @property
    def database_url(self) -> str:
        if self.DB_URL:
            return self.DB_URL
        return f'postgresql+{self.DB_DRIVER}://{self.DB_USERNAME}:{self.DB_PASSWORD}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}'

Settings = AppSettings()
