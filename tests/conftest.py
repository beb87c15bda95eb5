"""
Pytest configuration and fixtures for LendShelf tests.
"""

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from lendshelf.api.main import create_app
from lendshelf.api.dependencies import (
    ServiceContainer,
    Settings,
    get_service_container,
    get_settings,
)
from lendshelf.security import create_access_token
from lendshelf.storage import (
    BookRepository,
    CheckoutRepository,
    ConnectionPool,
    CreateBook,
    CreateUser,
    UserRepository,
    connect_database_with,
    create_tables,
    seed_roles,
)


# =============================================================================
# Test Settings
# =============================================================================

def get_test_settings() -> Settings:
    """Return settings configured for testing."""
    return Settings(
        database_url_override="sqlite+aiosqlite:///:memory:",
        database_echo=False,
        auto_create_tables=False,
        jwt_secret_key="test-secret-key",
        environment="test",
        debug=True,
    )


@pytest.fixture
def test_settings() -> Settings:
    return get_test_settings()


# =============================================================================
# Database Fixtures
# =============================================================================

@pytest_asyncio.fixture(scope="function")
async def pool(test_settings) -> AsyncGenerator[ConnectionPool, None]:
    """Fresh in-memory database with tables and roles."""
    connection_pool = connect_database_with(test_settings)
    await create_tables(connection_pool)
    await seed_roles(connection_pool)

    yield connection_pool

    await connection_pool.dispose()


@pytest.fixture
def book_repository(pool) -> BookRepository:
    return BookRepository(pool)


@pytest.fixture
def checkout_repository(pool) -> CheckoutRepository:
    return CheckoutRepository(pool)


@pytest.fixture
def user_repository(pool) -> UserRepository:
    return UserRepository(pool)


# =============================================================================
# Data Fixtures
# =============================================================================

@pytest.fixture
def sample_book() -> CreateBook:
    """Sample book data for testing."""
    return CreateBook(
        title="The Great Gatsby",
        author="F. Scott Fitzgerald",
        isbn="9780743273565",
        description="A story of decadence and excess in the Jazz Age.",
    )


@pytest.fixture
def sample_book_payload() -> dict:
    return {
        "title": "The Great Gatsby",
        "author": "F. Scott Fitzgerald",
        "isbn": "9780743273565",
        "description": "A story of decadence and excess in the Jazz Age.",
    }


@pytest_asyncio.fixture
async def owner(user_repository):
    """User who registers books."""
    return await user_repository.create(
        CreateUser(name="Olive Owner", email="owner@example.com", password="owner-password")
    )


@pytest_asyncio.fixture
async def borrower(user_repository):
    """User who checks books out."""
    return await user_repository.create(
        CreateUser(name="Bram Borrower", email="borrower@example.com", password="borrower-password")
    )


@pytest_asyncio.fixture
async def other_borrower(user_repository):
    return await user_repository.create(
        CreateUser(name="Cleo Second", email="second@example.com", password="second-password")
    )


# =============================================================================
# Application Fixtures
# =============================================================================

@pytest_asyncio.fixture(scope="function")
async def app(test_settings, pool):
    """Create FastAPI application for testing."""
    application = create_app(test_settings)
    container = ServiceContainer(test_settings, pool)

    # The transport does not run lifespan, so wire the container directly
    application.dependency_overrides[get_settings] = lambda: test_settings
    application.dependency_overrides[get_service_container] = lambda: container

    yield application

    application.dependency_overrides.clear()


@pytest_asyncio.fixture(scope="function")
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Provide async HTTP client for API tests."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def auth_headers(test_settings):
    """Build a bearer header for a user."""
    def _headers(user) -> dict:
        token = create_access_token(user.id, test_settings)
        return {"Authorization": f"Bearer {token}"}
    return _headers
