"""
Database models for LendShelf.

Table and column names follow the relational schema shared with other
services (users, roles, books, checkouts).
"""

from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    Index,
    String,
    Uuid,
    text,
)
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RoleModel(Base):
    """User roles (Admin, User)."""
    __tablename__ = "roles"

    role_id = Column(Uuid, primary_key=True, default=uuid4)
    name = Column(String(64), unique=True, nullable=False)


class UserModel(Base):
    """Registered users; owners and borrowers of books."""
    __tablename__ = "users"

    user_id = Column(Uuid, primary_key=True, default=uuid4)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password = Column(String(255), nullable=False)  # hashed
    role_id = Column(Uuid, ForeignKey("roles.role_id"), nullable=False)


class BookModel(Base):
    """SQLAlchemy model for books."""
    __tablename__ = "books"

    book_id = Column(Uuid, primary_key=True, default=uuid4)
    title = Column(String(255), nullable=False)
    author = Column(String(255), nullable=False)
    isbn = Column(String(255), nullable=False)
    description = Column(String(1024), nullable=False)
    user_id = Column(Uuid, ForeignKey("users.user_id"), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    __table_args__ = (
        Index("idx_books_created_at", "created_at"),
    )


class CheckoutModel(Base):
    """Lending records. A row with returned_at NULL is an open checkout."""
    __tablename__ = "checkouts"

    checkout_id = Column(Uuid, primary_key=True, default=uuid4)
    book_id = Column(
        Uuid,
        ForeignKey("books.book_id", ondelete="CASCADE"),
        nullable=False,
    )
    checked_out_by = Column(Uuid, ForeignKey("users.user_id"), nullable=False)
    checked_out_at = Column(DateTime(timezone=True), nullable=False)
    returned_by = Column(Uuid, ForeignKey("users.user_id"))
    returned_at = Column(DateTime(timezone=True))

    __table_args__ = (
        # At most one open checkout per book
        Index(
            "uq_checkouts_open_book",
            "book_id",
            unique=True,
            postgresql_where=text("returned_at IS NULL"),
            sqlite_where=text("returned_at IS NULL"),
        ),
        Index("idx_checkouts_checked_out_by", "checked_out_by"),
    )
