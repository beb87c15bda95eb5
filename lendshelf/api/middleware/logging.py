"""
Access logging for the LendShelf API.

Every request gets an id, taken from X-Request-ID or generated, which error
bodies pick up through get_request_id(). Access lines carry the book and
checkout ids found in the path, so one lending can be followed from
registration through checkout to return.
"""

import json
import logging
import re
import time
import uuid
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Set
from urllib.parse import parse_qsl

from fastapi import FastAPI, Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

request_id_var: ContextVar[str] = ContextVar("request_id", default="")

logger = logging.getLogger("lendshelf.api.access")

REQUEST_ID_HEADER = "X-Request-ID"

_UUID = r"[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}"
_RESOURCE_PATH = re.compile(
    rf"/books/(?P<book_id>{_UUID})(?:/checkouts/(?P<checkout_id>{_UUID}))?"
)

# Keys copied from an access record into the JSON line
_ACCESS_KEYS = ("method", "path", "status", "duration_ms", "book_id", "checkout_id", "body")


@dataclass
class LoggingConfig:
    """What the access log records."""

    enabled: bool = True
    log_request_body: bool = False
    excluded_paths: Set[str] = field(default_factory=set)
    redacted_fields: Set[str] = field(
        default_factory=lambda: {"password", "access_token", "client_secret"}
    )

    @classmethod
    def from_settings(cls, settings) -> "LoggingConfig":
        """Health checks stay out of the log; bodies are logged in development only."""
        return cls(
            log_request_body=settings.debug and settings.environment == "development",
            excluded_paths={
                f"{settings.api_prefix}/health",
                f"{settings.api_prefix}/health/db",
            },
        )


def get_request_id() -> str:
    """Id of the request being handled, or an empty string outside one."""
    return request_id_var.get()


def resource_ids(path: str) -> Dict[str, str]:
    """Book and checkout ids addressed by a request path."""
    match = _RESOURCE_PATH.search(path)
    if match is None:
        return {}
    return {key: value for key, value in match.groupdict().items() if value}


def redact_sensitive_data(data: Any, redacted_fields: Set[str], replacement: str = "[REDACTED]") -> Any:
    """Mask values of sensitive keys at any depth of a decoded body."""
    if isinstance(data, dict):
        masked = {}
        for key, value in data.items():
            if key.lower() in redacted_fields:
                masked[key] = replacement
            else:
                masked[key] = redact_sensitive_data(value, redacted_fields, replacement)
        return masked
    if isinstance(data, list):
        return [redact_sensitive_data(item, redacted_fields, replacement) for item in data]
    return data


def describe_body(body: bytes, content_type: str, redacted_fields: Set[str]) -> Any:
    """
    Loggable form of a request body.

    JSON (book payloads, registrations) and urlencoded forms (the token
    login) are decoded and masked; anything else is reported by size.
    """
    if content_type.startswith("application/json"):
        try:
            return redact_sensitive_data(json.loads(body), redacted_fields)
        except (json.JSONDecodeError, UnicodeDecodeError):
            return f"<invalid json, {len(body)} bytes>"
    if content_type.startswith("application/x-www-form-urlencoded"):
        form = dict(parse_qsl(body.decode("latin-1")))
        return redact_sensitive_data(form, redacted_fields)
    return f"<{len(body)} bytes>"


def _level_for(status_code: int) -> int:
    if status_code >= 500:
        return logging.ERROR
    if status_code >= 400:
        return logging.WARNING
    return logging.INFO


class JsonLogFormatter(logging.Formatter):
    """One JSON object per line, with the request id and access fields."""

    def format(self, record: logging.LogRecord) -> str:
        line = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        request_id = request_id_var.get()
        if request_id:
            line["request_id"] = request_id

        access = getattr(record, "access", None) or {}
        for key in _ACCESS_KEYS:
            if key in access:
                line[key] = access[key]

        if record.exc_info:
            line["exception"] = self.formatException(record.exc_info)
        return json.dumps(line, default=str)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Assigns request ids and writes one access line per request."""

    def __init__(self, app: FastAPI, config: LoggingConfig = None):
        super().__init__(app)
        self.config = config or LoggingConfig()

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex[:12]
        request_id_var.set(request_id)

        path = request.url.path
        if not self.config.enabled or path in self.config.excluded_paths:
            response = await call_next(request)
            response.headers[REQUEST_ID_HEADER] = request_id
            return response

        access = {"method": request.method, "path": path, **resource_ids(path)}
        if self.config.log_request_body and request.method in ("POST", "PUT"):
            body = await request.body()
            if body:
                access["body"] = describe_body(
                    body,
                    request.headers.get("content-type", ""),
                    self.config.redacted_fields,
                )

        started = time.perf_counter()
        response = await call_next(request)
        access["status"] = response.status_code
        access["duration_ms"] = round((time.perf_counter() - started) * 1000, 2)

        # A registered book is only identified by its Location header
        location = response.headers.get("location")
        if location:
            access.update(resource_ids(location))

        response.headers[REQUEST_ID_HEADER] = request_id
        logger.log(
            _level_for(response.status_code),
            "%s %s -> %s (%sms)",
            request.method,
            path,
            response.status_code,
            access["duration_ms"],
            extra={"access": access},
        )
        return response


def setup_logging(
    app: FastAPI,
    config: LoggingConfig = None,
    structured: bool = True,
) -> None:
    """
    Install the access log middleware.

    With ``structured`` the ``lendshelf`` logger writes JSON lines through
    its own handler and stops propagating, so lines are not repeated by the
    root handler.
    """
    if structured:
        lendshelf_logger = logging.getLogger("lendshelf")
        if not any(isinstance(h.formatter, JsonLogFormatter) for h in lendshelf_logger.handlers):
            handler = logging.StreamHandler()
            handler.setFormatter(JsonLogFormatter())
            lendshelf_logger.addHandler(handler)
        lendshelf_logger.setLevel(logging.INFO)
        lendshelf_logger.propagate = False

    app.add_middleware(RequestLoggingMiddleware, config=config or LoggingConfig())
