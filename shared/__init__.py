"""
Shared modules for the Ambulance Waiting List application.

This package contains shared configuration used by the API service and scripts.
"""

from shared.mongo_config import MongoServiceConfig

__all__ = [
    "MongoServiceConfig",
]
