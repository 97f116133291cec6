"""
MongoDB Configuration.

Centralized configuration for the MongoDB document store used across the application.
This ensures consistency between the API service and the data population script.

Environment Variables (optional overrides):
    AMBULANCE_API_MONGODB_HOST            - Server host (default: localhost)
    AMBULANCE_API_MONGODB_PORT            - Server port (default: 27017)
    AMBULANCE_API_MONGODB_DATABASE        - Database name
    AMBULANCE_API_MONGODB_COLLECTION      - Collection name
    AMBULANCE_API_MONGODB_USERNAME        - Username (basic auth needs both username and password)
    AMBULANCE_API_MONGODB_PASSWORD        - Password
    AMBULANCE_API_MONGODB_TIMEOUT_SECONDS - Connect and per-operation timeout
"""

import logging

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)

DEFAULT_PORT = 27017
DEFAULT_TIMEOUT_SECONDS = 10.0


class MongoServiceConfig(BaseSettings):
    """Connection settings for the MongoDB document store."""

    host: str = Field(default="localhost", description="MongoDB server host")
    port: int = Field(default=DEFAULT_PORT, description="MongoDB server port")
    database: str = Field(default="xcok-ambulance-wl", description="Database name")
    collection: str = Field(default="ambulance", description="Collection name")
    username: str = Field(default="", description="Username for basic auth")
    password: str = Field(default="", description="Password for basic auth")
    timeout_seconds: float = Field(
        default=DEFAULT_TIMEOUT_SECONDS,
        description="Timeout for the initial connection and default per-operation budget",
    )

    class Config:
        env_prefix = "AMBULANCE_API_MONGODB_"
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"

    @field_validator("port", mode="before")
    @classmethod
    def _port_or_default(cls, value):
        try:
            port = int(value)
        except (TypeError, ValueError):
            logger.warning(f"Invalid port value: {value!r}, using {DEFAULT_PORT}")
            return DEFAULT_PORT
        if port <= 0:
            logger.warning(f"Invalid port value: {value!r}, using {DEFAULT_PORT}")
            return DEFAULT_PORT
        return port

    @field_validator("timeout_seconds", mode="before")
    @classmethod
    def _timeout_or_default(cls, value):
        try:
            seconds = float(value)
        except (TypeError, ValueError):
            logger.warning(f"Invalid timeout value: {value!r}, using {DEFAULT_TIMEOUT_SECONDS}")
            return DEFAULT_TIMEOUT_SECONDS
        if seconds <= 0:
            logger.warning(f"Invalid timeout value: {value!r}, using {DEFAULT_TIMEOUT_SECONDS}")
            return DEFAULT_TIMEOUT_SECONDS
        return seconds

    @property
    def uses_auth(self) -> bool:
        """Basic auth is enabled only when both username and password are set."""
        return bool(self.username) and bool(self.password)

    def describe(self) -> str:
        """Connection summary safe to log (no password)."""
        return f"//{self.username}@{self.host}:{self.port}/{self.database}/{self.collection}"
