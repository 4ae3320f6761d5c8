"""
Centralized configuration for the permission guard service.
Loads environment variables (and an optional .env file) with safe defaults.
"""
import logging
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

DEFAULT_LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    # Service identification
    service_name: str = Field(default="permission-guard", validation_alias="SERVICE_NAME")
    service_version: str = Field(default="1.0.0", validation_alias="SERVICE_VERSION")
    environment: str = Field(default="development", validation_alias="ENVIRONMENT")
    port: int = Field(default=8000, validation_alias="PORT")

    # Logging
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    log_format: str = Field(default=DEFAULT_LOG_FORMAT, validation_alias="LOG_FORMAT")

    # Permission rules; inline JSON wins over the file
    permission_rules_file: Optional[str] = Field(default=None, validation_alias="PERMISSION_RULES_FILE")
    permission_rules_json: Optional[str] = Field(default=None, validation_alias="PERMISSION_RULES_JSON")
    # Overrides the "enabled" flag of the loaded rule document when set
    permission_enabled: Optional[bool] = Field(default=None, validation_alias="PERMISSION_ENABLED")
    # 0 buffers bodies of any size
    permission_max_body_bytes: int = Field(default=0, ge=0, validation_alias="PERMISSION_MAX_BODY_BYTES")

    # Error handling
    verbose_error_messages: bool = Field(default=False, validation_alias="VERBOSE_ERROR_MESSAGES")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        populate_by_name=True,
        extra="ignore",
    )

    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment.lower() == "production"


# Global settings instance
settings = Settings()
