"""
Use Cases Package.

This package contains modular use case implementations. Each use case is a
self-contained module with its own:
- Entity models
- domain/: Pure business logic (services)
- api.py: HTTP routes composing the domain with the data layer

Available use cases:
- ambulance: Ambulance waiting lists with estimated start times
"""

from use_cases.ambulance import AmbulanceApi, Ambulance

__all__ = [
    "AmbulanceApi",
    "Ambulance",
]
