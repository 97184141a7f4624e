"""
Configuration management using Pydantic Settings

Runtime settings (environment, logging) for the toolkit, loaded from
environment variables and an optional .env file.
"""

from functools import lru_cache
from typing import Optional
from pydantic_settings import BaseSettings
from pydantic import Field, validator

from .configs.processing_config import ProcessingConfig


class Settings(BaseSettings):
    """Toolkit settings with environment variable support"""

    # Application Info
    app_name: str = Field(default="PixelKit")
    app_version: str = Field(default="1.0.0")
    environment: str = Field(default="development")
    debug: bool = Field(default=False)

    # Processing Configuration
    max_processing_time: float = Field(default=10.0)
    fail_on_timeout: bool = Field(default=False)

    # Logging Configuration
    log_level: str = Field(default="INFO")
    log_file: Optional[str] = Field(default=None)
    log_format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )
    log_max_size_mb: int = Field(default=10)
    log_backup_count: int = Field(default=5)

    @validator("environment")
    def validate_environment(cls, v):
        """Validate environment value"""
        allowed = ["development", "staging", "production", "testing"]
        if v not in allowed:
            raise ValueError(f"Environment must be one of: {', '.join(allowed)}")
        return v

    @validator("log_level")
    def validate_log_level(cls, v):
        """Validate log level"""
        allowed = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v = v.upper()
        if v not in allowed:
            raise ValueError(f"Log level must be one of: {', '.join(allowed)}")
        return v

    @validator("max_processing_time")
    def validate_max_processing_time(cls, v):
        if v <= 0:
            raise ValueError("Max processing time must be positive")
        return v

    @property
    def log_max_size_bytes(self) -> int:
        return self.log_max_size_mb * 1024 * 1024

    @property
    def is_production(self) -> bool:
        """Check if running in production"""
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development"""
        return self.environment == "development"

    class Config:
        """Pydantic configuration"""
        env_prefix = "PIXELKIT_"
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"  # Ignore extra fields in .env file


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance

    Returns:
        Settings: Toolkit settings singleton
    """
    return Settings()


def get_log_config(settings: Optional[Settings] = None) -> dict:
    """Get logging configuration dict, ready for setup_logging(**...)"""
    settings = settings or get_settings()
    return {
        "log_level": settings.log_level,
        "format_string": settings.log_format,
        "log_file": settings.log_file,
        "max_file_size": settings.log_max_size_bytes,
        "backup_count": settings.log_backup_count,
    }


def get_processing_config(settings: Optional[Settings] = None) -> ProcessingConfig:
    """Processing defaults with the runtime limits from settings applied"""
    settings = settings or get_settings()
    return ProcessingConfig(
        MAX_PROCESSING_TIME=settings.max_processing_time,
        FAIL_ON_TIMEOUT=settings.fail_on_timeout,
    )
