from pydantic_settings import BaseSettings
from typing import List

class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./dev.db"
    APP_HOST: str = "0.0.0.0"
    APP_PORT: int = 5000
    ENVIRONMENT: str = "production"
    FRONTEND_ORIGINS: List[str] = ["http://localhost:5000"]
    LOG_LEVEL: str = "INFO"

    # request security
    TRUST_PROXY: bool = True
    TRUSTED_ORIGIN_HOSTS: List[str] = ["localhost:5000"]
    MAX_REQUEST_BYTES: int = 1024 * 1024
    RATE_LIMIT_ENABLED: bool = True
    SUSPICIOUS_SWEEP_MINUTES: int = 60

    # admin
    ADMIN_SESSION_TTL_HOURS: int = 24
    SESSION_PURGE_MINUTES: int = 30

    SEED_ON_STARTUP: bool = False

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

    @property
    def is_development(self) -> bool:
        return self.ENVIRONMENT.lower() == "development"

settings = Settings()
