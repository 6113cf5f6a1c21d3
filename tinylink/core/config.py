from typing import List, Optional

from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    PROJECT_NAME: str = "TinyLink"
    VERSION: str = "1.0"
    BASE_URL: str = "http://localhost:3000"
    LOG_LEVEL: str = "INFO"

    # Browser origins allowed to call the API (JSON list in env)
    CORS_ORIGINS: List[str] = ["*"]

    # Storage selection: "file" or "sql". Left unset, a DATABASE_URL implies "sql".
    STORAGE_BACKEND: Optional[str] = None
    DATABASE_URL: Optional[str] = None
    DATA_FILE: str = "data/links.json"

    class Config:
        env_file = ".env"

    @property
    def storage_backend(self) -> str:
        if self.STORAGE_BACKEND:
            return self.STORAGE_BACKEND.strip().lower()
        return "sql" if self.DATABASE_URL else "file"

settings = Settings()
