"""
Configuration module for the Ambulance Waiting List API.
Loads settings from environment variables (and an optional .env file).

MongoDB connection settings live in shared/mongo_config.py.
"""

from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application Configuration
    app_host: str = Field(
        default="0.0.0.0",
        alias="AMBULANCE_API_HOST",
        description="Host to bind the application"
    )
    app_port: int = Field(
        default=8080,
        alias="AMBULANCE_API_PORT",
        description="Port to bind the application"
    )
    environment: str = Field(
        default="development",
        alias="AMBULANCE_API_ENVIRONMENT",
        description="Deployment environment; anything but 'production' enables debug mode"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        alias="LOG_LEVEL",
        description="Logging level"
    )

    @property
    def debug(self) -> bool:
        return self.environment.lower() != "production"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


# Global settings instance
settings = Settings()
