"""
API Schemas for LendShelf

Pydantic models for request validation and response serialization:
- Book models
- Checkout models
- User/auth models
- System models

Design Decisions:
1. Separate Request/Response: Clear distinction between inputs and outputs
2. Responses are built from storage records with explicit from_* helpers
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from ..storage.records import (
    Book,
    BookCheckout,
    Checkout,
    CheckoutState,
    CreateBook,
    CreateUser,
    Role,
    UpdateBook,
    User,
)


# =============================================================================
# Book Schemas
# =============================================================================

class BookBase(BaseModel):
    """Base book fields."""

    title: str = Field(..., min_length=1, max_length=255)
    author: str = Field(..., min_length=1, max_length=255)
    isbn: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1, max_length=1024)


class CreateBookRequest(BookBase):
    """Book registration request."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "title": "Dune",
                "author": "Frank Herbert",
                "isbn": "9780441172719",
                "description": "Desert planet, spice, sandworms.",
            }
        }
    )

    def to_command(self) -> CreateBook:
        return CreateBook(
            title=self.title,
            author=self.author,
            isbn=self.isbn,
            description=self.description,
        )


class UpdateBookRequest(BookBase):
    """Book update request (all fields replaced)."""

    def to_command(self, book_id: UUID, requested_user: UUID) -> UpdateBook:
        return UpdateBook(
            book_id=book_id,
            title=self.title,
            author=self.author,
            isbn=self.isbn,
            description=self.description,
            requested_user=requested_user,
        )


class BookOwnerResponse(BaseModel):
    id: UUID
    name: str


class BorrowerResponse(BaseModel):
    id: UUID
    name: str


class BookCheckoutResponse(BaseModel):
    """Open checkout of a book."""

    id: UUID
    borrower: BorrowerResponse
    checked_out_at: datetime

    @classmethod
    def from_checkout(cls, checkout: BookCheckout) -> "BookCheckoutResponse":
        return cls(
            id=checkout.checkout_id,
            borrower=BorrowerResponse(
                id=checkout.checked_out_by.id,
                name=checkout.checked_out_by.name,
            ),
            checked_out_at=checkout.checked_out_at,
        )


class BookResponse(BookBase):
    """Book response model."""

    id: UUID
    owner: BookOwnerResponse
    checkout: Optional[BookCheckoutResponse] = None

    @classmethod
    def from_book(cls, book: Book) -> "BookResponse":
        return cls(
            id=book.id,
            title=book.title,
            author=book.author,
            isbn=book.isbn,
            description=book.description,
            owner=BookOwnerResponse(id=book.owner.id, name=book.owner.name),
            checkout=(
                BookCheckoutResponse.from_checkout(book.checkout)
                if book.checkout
                else None
            ),
        )


# =============================================================================
# Checkout Schemas
# =============================================================================

class CheckoutCreatedResponse(BaseModel):
    id: UUID


class CheckoutResponse(BaseModel):
    """Checkout record, open or returned."""

    id: UUID
    book_id: UUID
    checked_out_by: UUID
    checked_out_at: datetime
    returned_by: Optional[UUID] = None
    returned_at: Optional[datetime] = None
    state: CheckoutState

    @classmethod
    def from_checkout(cls, checkout: Checkout) -> "CheckoutResponse":
        return cls(
            id=checkout.checkout_id,
            book_id=checkout.book_id,
            checked_out_by=checkout.checked_out_by,
            checked_out_at=checkout.checked_out_at,
            returned_by=checkout.returned_by,
            returned_at=checkout.returned_at,
            state=checkout.state,
        )


# =============================================================================
# User Schemas
# =============================================================================

class CreateUserRequest(BaseModel):
    """User registration request."""

    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=128)

    def to_command(self) -> CreateUser:
        return CreateUser(name=self.name, email=self.email, password=self.password)


class UserResponse(BaseModel):
    id: UUID
    name: str
    email: str
    role: Role

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        return cls(id=user.id, name=user.name, email=user.email, role=user.role)


class Token(BaseModel):
    access_token: str
    token_type: str
    user_id: UUID


# =============================================================================
# System Schemas
# =============================================================================

class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
    components: dict[str, str] = Field(default_factory=dict)


class ErrorResponse(BaseModel):
    """Error response body."""

    error: str
    code: str
    detail: Optional[str] = None
    request_id: Optional[str] = None
    timestamp: datetime
