"""
CORS for browser clients of the LendShelf API.

Origins come from Settings (``CORS_ALLOWED_ORIGINS``). With none configured,
development accepts any origin and every other environment accepts none.
"""

from dataclasses import dataclass, field
from typing import List

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Response headers a browser client has to read: paging total, new book URL, request id
EXPOSED_HEADERS = ["X-Total-Count", "Location", "X-Request-ID"]

ALLOWED_METHODS = ["GET", "POST", "PUT", "DELETE"]

ALLOWED_HEADERS = ["Authorization", "Content-Type", "X-Request-ID"]


@dataclass
class CORSConfig:
    """Resolved origin policy."""

    allowed_origins: List[str] = field(default_factory=list)
    allow_any_origin: bool = False
    max_age: int = 600

    @property
    def allow_credentials(self) -> bool:
        # Browsers refuse credentials on a wildcard origin
        return not self.allow_any_origin


def get_cors_config(settings) -> CORSConfig:
    """Build the origin policy from application settings."""
    origins = list(settings.cors_allowed_origins)
    return CORSConfig(
        allowed_origins=origins,
        allow_any_origin=not origins and settings.environment == "development",
    )


def setup_cors(app: FastAPI, config: CORSConfig) -> None:
    """Install CORSMiddleware with the given policy."""
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if config.allow_any_origin else config.allowed_origins,
        allow_credentials=config.allow_credentials,
        allow_methods=ALLOWED_METHODS,
        allow_headers=ALLOWED_HEADERS,
        expose_headers=EXPOSED_HEADERS,
        max_age=config.max_age,
    )
