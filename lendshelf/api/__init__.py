"""
LendShelf - FastAPI Backend.

HTTP API for a shared library of books.
"""

from .main import app, create_app, main
from .dependencies import (
    Settings,
    get_settings,
    get_service_container,
    ServiceContainer,
    CurrentUser,
)
from .schemas import (
    BookResponse,
    CheckoutResponse,
    CreateBookRequest,
    CreateUserRequest,
    UpdateBookRequest,
    UserResponse,
    Token,
    HealthResponse,
    ErrorResponse,
)

__all__ = [
    # Application
    "app",
    "create_app",
    "main",
    # Dependencies
    "Settings",
    "get_settings",
    "get_service_container",
    "ServiceContainer",
    "CurrentUser",
    # Schemas
    "BookResponse",
    "CheckoutResponse",
    "CreateBookRequest",
    "CreateUserRequest",
    "UpdateBookRequest",
    "UserResponse",
    "Token",
    "HealthResponse",
    "ErrorResponse",
]
