"""
API middleware components.

Provides cross-cutting concerns for the API:
- Error handling
- CORS configuration
- Request/response logging
"""

from .error_handler import (
    setup_exception_handlers,
    create_error_response,
)

from .cors import (
    CORSConfig,
    get_cors_config,
    setup_cors,
)

from .logging import (
    LoggingConfig,
    JsonLogFormatter,
    RequestLoggingMiddleware,
    setup_logging,
    get_request_id,
    describe_body,
    redact_sensitive_data,
    resource_ids,
)


__all__ = [
    # Error handling
    "setup_exception_handlers",
    "create_error_response",
    # CORS
    "CORSConfig",
    "get_cors_config",
    "setup_cors",
    # Logging
    "LoggingConfig",
    "JsonLogFormatter",
    "RequestLoggingMiddleware",
    "setup_logging",
    "get_request_id",
    "describe_body",
    "redact_sensitive_data",
    "resource_ids",
]
