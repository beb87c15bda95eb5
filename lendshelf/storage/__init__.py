"""
Storage Module for LendShelf

Relational storage for books, users and checkouts:
- Async SQLAlchemy connection pool (PostgreSQL / SQLite)
- Repositories translating domain commands into SQL
- Plain domain records mapped explicitly from rows
"""

from lendshelf.storage.database import (
    ConnectionPool,
    connect_database_with,
    create_engine,
    create_tables,
    seed_roles,
)
from lendshelf.storage.book_repository import BookRepository
from lendshelf.storage.checkout_repository import CheckoutRepository
from lendshelf.storage.user_repository import UserRepository
from lendshelf.storage.records import (
    Book,
    BookCheckout,
    BookListOptions,
    BookOwner,
    Checkout,
    CheckoutState,
    CheckoutUser,
    CreateBook,
    CreateCheckout,
    CreateUser,
    DeleteBook,
    PaginatedList,
    Role,
    UpdateBook,
    UpdateReturned,
    User,
    UserCredentials,
)

__all__ = [
    # Database
    "ConnectionPool",
    "connect_database_with",
    "create_engine",
    "create_tables",
    "seed_roles",
    # Repositories
    "BookRepository",
    "CheckoutRepository",
    "UserRepository",
    # Records
    "Book",
    "BookCheckout",
    "BookOwner",
    "Checkout",
    "CheckoutState",
    "CheckoutUser",
    "PaginatedList",
    "Role",
    "User",
    "UserCredentials",
    # Commands
    "BookListOptions",
    "CreateBook",
    "CreateCheckout",
    "CreateUser",
    "DeleteBook",
    "UpdateBook",
    "UpdateReturned",
]
