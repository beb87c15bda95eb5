"""
Application errors for LendShelf.

Repositories raise these; the HTTP layer is the only place that turns
them into responses (see api.middleware.error_handler).
"""


class AppError(Exception):
    """Base exception for LendShelf errors."""

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        status_code: int = 500,
        detail: str = None,
    ):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.detail = detail
        super().__init__(message)


class EntityNotFound(AppError):
    """
    Targeted row does not exist.

    Also raised when an owner-scoped update/delete matches nothing, so a
    caller cannot tell "absent" from "not yours".
    """

    def __init__(self, message: str, detail: str = None):
        super().__init__(
            message=message,
            code="NOT_FOUND",
            status_code=404,
            detail=detail,
        )


class PersistenceError(AppError):
    """Underlying database failure (connection, constraint, query)."""

    def __init__(self, message: str = "Database operation failed"):
        super().__init__(
            message=message,
            code="PERSISTENCE_ERROR",
            status_code=500,
            detail="The operation could not be completed",
        )


class UnprocessableResource(AppError):
    """Request is well-formed but conflicts with current state."""

    def __init__(self, message: str, detail: str = None):
        super().__init__(
            message=message,
            code="UNPROCESSABLE_RESOURCE",
            status_code=422,
            detail=detail,
        )


class UnauthenticatedError(AppError):
    """Missing, expired or invalid credentials."""

    def __init__(self, message: str = "Could not validate credentials"):
        super().__init__(
            message=message,
            code="UNAUTHENTICATED",
            status_code=401,
        )
