"""
API Routes for LendShelf

Route modules:
- auth: Token issuing
- users: Registration and the current user
- books: Book CRUD
- checkouts: Borrowing and returning
- health: Liveness and database readiness
"""

from lendshelf.api.routes.auth import router as auth_router
from lendshelf.api.routes.users import router as users_router
from lendshelf.api.routes.books import router as books_router
from lendshelf.api.routes.checkouts import router as checkouts_router
from lendshelf.api.routes.health import router as health_router

__all__ = [
    "auth_router",
    "users_router",
    "books_router",
    "checkouts_router",
    "health_router",
]
