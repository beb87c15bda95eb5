"""
Domain records and commands for LendShelf.

Records are plain dataclasses built from query rows through explicit
``from_row`` constructors; commands carry the input of a repository
mutation.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Generic, Optional, TypeVar
from uuid import UUID

T = TypeVar("T")


# =============================================================================
# Records
# =============================================================================

class Role(str, Enum):
    """User role."""
    ADMIN = "Admin"
    USER = "User"


class CheckoutState(str, Enum):
    """Checkout lifecycle. OPEN -> RETURNED is the only transition."""
    OPEN = "open"
    RETURNED = "returned"


@dataclass
class BookOwner:
    id: UUID
    name: str


@dataclass
class CheckoutUser:
    id: UUID
    name: str


@dataclass
class BookCheckout:
    """Open checkout attached to a book."""

    checkout_id: UUID
    checked_out_by: CheckoutUser
    checked_out_at: datetime


@dataclass
class Book:
    """Book with its owner and, when lent out, the open checkout."""

    id: UUID
    title: str
    author: str
    isbn: str
    description: str
    owner: BookOwner
    checkout: Optional[BookCheckout] = None

    @classmethod
    def from_row(cls, row) -> "Book":
        """
        Create from a book detail row.

        Expects the labels produced by the book detail query: book_id,
        title, author, isbn, description, owned_by, owner_name and the
        nullable checkout columns checkout_id, checked_out_by,
        checked_out_by_name, checked_out_at.
        """
        m = row._mapping
        checkout = None
        if m["checkout_id"] is not None:
            checkout = BookCheckout(
                checkout_id=m["checkout_id"],
                checked_out_by=CheckoutUser(
                    id=m["checked_out_by"],
                    name=m["checked_out_by_name"],
                ),
                checked_out_at=m["checked_out_at"],
            )
        return cls(
            id=m["book_id"],
            title=m["title"],
            author=m["author"],
            isbn=m["isbn"],
            description=m["description"],
            owner=BookOwner(id=m["owned_by"], name=m["owner_name"]),
            checkout=checkout,
        )


@dataclass
class Checkout:
    """Full checkout record, open or returned."""

    checkout_id: UUID
    book_id: UUID
    checked_out_by: UUID
    checked_out_at: datetime
    returned_by: Optional[UUID] = None
    returned_at: Optional[datetime] = None

    @property
    def state(self) -> CheckoutState:
        if self.returned_at is None:
            return CheckoutState.OPEN
        return CheckoutState.RETURNED

    @classmethod
    def from_row(cls, row) -> "Checkout":
        m = row._mapping
        return cls(
            checkout_id=m["checkout_id"],
            book_id=m["book_id"],
            checked_out_by=m["checked_out_by"],
            checked_out_at=m["checked_out_at"],
            returned_by=m["returned_by"],
            returned_at=m["returned_at"],
        )


@dataclass
class User:
    id: UUID
    name: str
    email: str
    role: Role

    @classmethod
    def from_row(cls, row) -> "User":
        m = row._mapping
        return cls(
            id=m["user_id"],
            name=m["name"],
            email=m["email"],
            role=Role(m["role_name"]),
        )


@dataclass
class UserCredentials:
    user_id: UUID
    password_hash: str


@dataclass
class PaginatedList(Generic[T]):
    """
    One page of a listing.

    ``total`` is the size of the whole set, independent of limit/offset.
    """

    total: int
    limit: int
    offset: int
    items: list[T] = field(default_factory=list)


# =============================================================================
# Commands
# =============================================================================

@dataclass
class BookListOptions:
    limit: int = 20
    offset: int = 0


@dataclass
class CreateBook:
    title: str
    author: str
    isbn: str
    description: str


@dataclass
class UpdateBook:
    book_id: UUID
    title: str
    author: str
    isbn: str
    description: str
    requested_user: UUID


@dataclass
class DeleteBook:
    book_id: UUID
    requested_user: UUID


@dataclass
class CreateCheckout:
    book_id: UUID
    checked_out_by: UUID
    checked_out_at: datetime


@dataclass
class UpdateReturned:
    checkout_id: UUID
    book_id: UUID
    returned_by: UUID
    returned_at: datetime


@dataclass
class CreateUser:
    name: str
    email: str
    password: str
