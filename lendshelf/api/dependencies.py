"""
Dependency injection for FastAPI routes.

Provides injectable dependencies for:
- Configuration
- Connection pool and repositories
- Authentication
"""

import os
from typing import Annotated, List, Optional
from functools import lru_cache
from dataclasses import dataclass, field

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.engine import URL

from ..errors import UnauthenticatedError
from ..security import decode_access_token
from ..storage.database import ConnectionPool, connect_database_with
from ..storage.records import User


# =============================================================================
# Configuration
# =============================================================================

API_PREFIX = "/api/v1"


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("true", "1", "yes")


def _env_list(name: str) -> List[str]:
    return [item.strip() for item in os.getenv(name, "").split(",") if item.strip()]


@dataclass
class Settings:
    """Application settings loaded from environment."""

    # Database
    database_host: str = "localhost"
    database_port: int = 5432
    database_username: str = "app"
    database_password: str = "passwd"
    database_name: str = "app"
    database_url_override: Optional[str] = None
    database_pool_size: int = 10
    database_echo: bool = False
    auto_create_tables: bool = True

    # Auth
    jwt_secret_key: str = "change-this-secret-in-production"
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60

    # Pagination
    default_page_limit: int = 20
    max_page_limit: int = 100

    # Environment
    environment: str = "development"
    debug: bool = True
    api_prefix: str = API_PREFIX

    # CORS
    cors_allowed_origins: List[str] = field(default_factory=list)

    @property
    def database_url(self) -> str:
        """SQLAlchemy URL; DATABASE_URL wins over the individual parts."""
        if self.database_url_override:
            return self.database_url_override
        return URL.create(
            "postgresql+asyncpg",
            username=self.database_username,
            password=self.database_password,
            host=self.database_host,
            port=self.database_port,
            database=self.database_name,
        ).render_as_string(hide_password=False)

    @classmethod
    def from_env(cls) -> "Settings":
        """Load settings from environment variables."""
        return cls(
            database_host=os.getenv("DATABASE_HOST", cls.database_host),
            database_port=int(os.getenv("DATABASE_PORT", cls.database_port)),
            database_username=os.getenv("DATABASE_USERNAME", cls.database_username),
            database_password=os.getenv("DATABASE_PASSWORD", cls.database_password),
            database_name=os.getenv("DATABASE_NAME", cls.database_name),
            database_url_override=os.getenv("DATABASE_URL"),
            database_pool_size=int(os.getenv("DATABASE_POOL_SIZE", cls.database_pool_size)),
            database_echo=_env_bool("DATABASE_ECHO", "false"),
            auto_create_tables=_env_bool("AUTO_CREATE_TABLES", "true"),
            jwt_secret_key=os.getenv("JWT_SECRET_KEY", cls.jwt_secret_key),
            jwt_algorithm=os.getenv("JWT_ALGORITHM", cls.jwt_algorithm),
            access_token_expire_minutes=int(
                os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", cls.access_token_expire_minutes)
            ),
            default_page_limit=int(os.getenv("DEFAULT_PAGE_LIMIT", cls.default_page_limit)),
            max_page_limit=int(os.getenv("MAX_PAGE_LIMIT", cls.max_page_limit)),
            environment=os.getenv("LENDSHELF_ENV", cls.environment),
            debug=_env_bool("DEBUG", "true"),
            api_prefix=os.getenv("API_PREFIX", cls.api_prefix),
            cors_allowed_origins=_env_list("CORS_ALLOWED_ORIGINS"),
        )


@lru_cache()
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings.from_env()


# =============================================================================
# Database
# =============================================================================

def init_database(settings: Settings) -> ConnectionPool:
    """Create the connection pool. Connections open lazily."""
    return connect_database_with(settings)


# =============================================================================
# Service Dependencies (Lazy Loading)
# =============================================================================

class ServiceContainer:
    """
    Container for lazily built repositories sharing one connection pool.
    """

    def __init__(self, settings: Settings, pool: ConnectionPool):
        self.settings = settings
        self.pool = pool
        self._book_repository = None
        self._checkout_repository = None
        self._user_repository = None

    @property
    def book_repository(self):
        """Get book repository instance."""
        if self._book_repository is None:
            from ..storage.book_repository import BookRepository
            self._book_repository = BookRepository(self.pool)
        return self._book_repository

    @property
    def checkout_repository(self):
        """Get checkout repository instance."""
        if self._checkout_repository is None:
            from ..storage.checkout_repository import CheckoutRepository
            self._checkout_repository = CheckoutRepository(self.pool)
        return self._checkout_repository

    @property
    def user_repository(self):
        """Get user repository instance."""
        if self._user_repository is None:
            from ..storage.user_repository import UserRepository
            self._user_repository = UserRepository(self.pool)
        return self._user_repository


# Global service container
_service_container: Optional[ServiceContainer] = None


def init_services(settings: Settings, pool: ConnectionPool) -> ServiceContainer:
    """Initialize service container."""
    global _service_container
    _service_container = ServiceContainer(settings, pool)
    return _service_container


def get_service_container() -> ServiceContainer:
    """Get service container instance."""
    if _service_container is None:
        # Auto-initialize with default settings if not explicitly initialized
        settings = get_settings()
        return init_services(settings, init_database(settings))
    return _service_container


# =============================================================================
# Individual Service Dependencies
# =============================================================================

def get_book_repository(
    container: ServiceContainer = Depends(get_service_container),
):
    """Dependency for book repository."""
    return container.book_repository


def get_checkout_repository(
    container: ServiceContainer = Depends(get_service_container),
):
    """Dependency for checkout repository."""
    return container.checkout_repository


def get_user_repository(
    container: ServiceContainer = Depends(get_service_container),
):
    """Dependency for user repository."""
    return container.user_repository


# =============================================================================
# Authentication Dependencies
# =============================================================================

oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{API_PREFIX}/auth/token", auto_error=False)


def configure_token_url(api_prefix: str) -> None:
    """Point the OpenAPI password flow at the token route under ``api_prefix``."""
    oauth2_scheme.model.flows.password.tokenUrl = f"{api_prefix}/auth/token"


async def get_current_user(
    token: Annotated[Optional[str], Depends(oauth2_scheme)],
    container: ServiceContainer = Depends(get_service_container),
) -> User:
    """
    Resolve the bearer token to a registered user.

    Raises:
        UnauthenticatedError: Missing/invalid token or unknown user
    """
    if not token:
        raise UnauthenticatedError("Not authenticated")

    user_id = decode_access_token(token, container.settings)
    user = await container.user_repository.find_by_id(user_id)
    if user is None:
        raise UnauthenticatedError()
    return user


CurrentUser = Annotated[User, Depends(get_current_user)]
