"""
Client configuration using Pydantic Settings
"""
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Client settings loaded from environment variables
    """
    # API
    API_URL: str = "http://localhost:3000/api"
    API_TIMEOUT: int = 10000  # milliseconds, same unit the mobile build used

    # Retry policy (network errors / 5xx)
    RETRY_ATTEMPTS: int = 3
    RETRY_BASE_DELAY: float = 0.3
    RETRY_MAX_DELAY: float = 3.0

    # Local durable storage for token + profile snapshot
    STORAGE_URL: str = "sqlite:///saldo_cliente.db"

    # Application
    LOG_LEVEL: str = "INFO"
    DEBUG: bool = False

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    @property
    def timeout_seconds(self) -> float:
        """API_TIMEOUT converted to seconds (requests expects seconds)"""
        if self.API_TIMEOUT <= 0:
            return 10.0
        return self.API_TIMEOUT / 1000

    def get_base_url(self) -> str:
        """
        Base URL with a trailing slash, so relative paths join under /api
        """
        url = self.API_URL
        if not url.endswith("/"):
            url += "/"
        return url


@lru_cache
def get_settings() -> Settings:
    """
    Cached settings instance (singleton)
    """
    return Settings()
