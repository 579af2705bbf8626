"""Application configuration."""
from pathlib import Path
from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional
from urllib.parse import urlparse

# Get the project root directory (4 levels up from this file: backend/bailian_gateway/core/config.py)
PROJECT_ROOT = Path(__file__).parent.parent.parent.parent
ENV_FILE = PROJECT_ROOT / ".env"


class Settings(BaseSettings):
    """Application settings."""

    # Application
    APP_NAME: str = "Bailian Gateway"
    LOG_LEVEL: str = "INFO"
    LOG_TO_FILE: bool = True
    GATEWAY_PORT: int = 8001

    # CORS - stored as string in env, converted to list
    CORS_ORIGINS: str = "*"

    @property
    def cors_origins_list(self) -> List[str]:
        """Get CORS origins as a list."""
        origins = [origin.strip() for origin in self.CORS_ORIGINS.split(',') if origin.strip()]
        return origins if origins else ["*"]

    # Gateway
    MODEL_MAPPING: Optional[str] = None  # JSON string for custom model mapping

    # DashScope (Alibaba Cloud Bailian)
    DASHSCOPE_API_KEY: str = ""
    DASHSCOPE_BASE_URL: str = "https://dashscope.aliyuncs.com"
    DASHSCOPE_PLUGIN: Optional[str] = None  # Opaque X-DashScope-Plugin header value
    DASHSCOPE_TIMEOUT_SECONDS: float = 60.0
    DASHSCOPE_CONNECT_TIMEOUT_SECONDS: float = 10.0

    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE) if ENV_FILE.exists() else ".env",
        case_sensitive=True,
        env_file_encoding="utf-8",
        extra="ignore",  # Ignore extra fields from .env that aren't in this model
    )

    @field_validator('DASHSCOPE_BASE_URL')
    @classmethod
    def validate_dashscope_url(cls, v: str) -> str:
        """Validate DashScope base URL format."""
        if not v.startswith(('http://', 'https://')):
            raise ValueError('DASHSCOPE_BASE_URL must start with http:// or https://')
        if not urlparse(v).netloc:
            raise ValueError(f'Invalid DASHSCOPE_BASE_URL: {v}')
        return v.rstrip('/')

    @field_validator('LOG_LEVEL')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level name."""
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f'Unknown LOG_LEVEL: {v}')
        return level

    @field_validator('DASHSCOPE_TIMEOUT_SECONDS', 'DASHSCOPE_CONNECT_TIMEOUT_SECONDS')
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        """Validate timeouts are positive."""
        if v <= 0:
            raise ValueError('Timeouts must be greater than 0')
        return v

    @model_validator(mode='after')
    def warn_missing_api_key(self):
        """Warn when no DashScope key is configured."""
        if not self.DASHSCOPE_API_KEY:
            import logging
            logging.getLogger(__name__).warning(
                "DASHSCOPE_API_KEY is not set. Chat requests will fail until a key is configured."
            )
        return self


settings = Settings()
