from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    APP_ENV: str = "development"
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False
    REQUEST_TIMEOUT: Optional[float] = None  # seconds, unset means no deadline
    SOCKET_TIMEOUT: float = 60.0  # seconds per connect/read when there is no deadline

    class Config:
        env_file = ".env"  # relative to the working directory
        env_file_encoding = "utf-8"

settings = Settings()
