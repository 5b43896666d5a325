"""
Application configuration settings.
"""
from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    """Application settings."""

    # App
    APP_NAME: str = "OAS Runner"
    DEBUG: bool = False

    # CORS
    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:8000"

    def get_cors_origins(self) -> List[str]:
        """Parse CORS origins from comma-separated string."""
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]

    # Logging
    LOG_DIR: str = "logs"
    LOG_LEVEL: str = "INFO"

    # Encryption (auth configurations are kept encrypted in memory)
    ENCRYPTION_KEY: str = "your-encryption-key-change-in-production"

    # Execution
    REQUEST_TIMEOUT: float = 30.0
    SPEC_FETCH_TIMEOUT: float = 30.0
    MAX_WORKERS: int = 1

    # Synthetic data
    MAX_SCHEMA_DEPTH: int = 32
    OPTIONAL_PROPERTY_PROBABILITY: float = 0.7

    # Auth defaults used when a config or security scheme lacks credentials
    DEFAULT_AUTH_KEY: str = ""
    DEFAULT_AUTH_VALUE: str = ""
    DEFAULT_BEARER_TOKEN: str = ""
    BEARER_TOKEN: str = ""
    API_KEY: str = ""
    API_KEY_HEADER: str = ""
    BASIC_AUTH_USER: str = ""
    BASIC_AUTH_PASS: str = ""
    OAUTH_TOKEN: str = ""

    # Monitoring
    ENABLE_METRICS: bool = True

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
