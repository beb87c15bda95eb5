"""
Book Repository for LendShelf

Structured storage for books using SQLAlchemy (async):
- PostgreSQL for production
- SQLite for development/testing

Design Decisions:
1. No caching: every read re-queries current state
2. Owner-scoped mutation: update/delete match on book id AND owner id,
   a miss on either is reported as EntityNotFound
3. Two-step listing: a window query picks the page of ids and the total,
   a detail query fetches those books with owner and open checkout
4. Checkout status is derived by joining only open checkouts
"""

from typing import Optional
from uuid import UUID, uuid4

from loguru import logger
from sqlalchemy import Select, and_, delete, func, insert, select, update
from sqlalchemy.orm import aliased

from lendshelf.errors import EntityNotFound
from .database import ConnectionPool
from .models import BookModel, CheckoutModel, UserModel
from .records import (
    Book,
    BookListOptions,
    CreateBook,
    DeleteBook,
    PaginatedList,
    UpdateBook,
)


def book_detail_query() -> Select:
    """
    Select books joined with their owner and open checkout (if any).

    Callers add the WHERE clause. Rows are labelled for Book.from_row.
    """
    owner = aliased(UserModel, name="owner")
    borrower = aliased(UserModel, name="borrower")

    return (
        select(
            BookModel.book_id,
            BookModel.title,
            BookModel.author,
            BookModel.isbn,
            BookModel.description,
            owner.user_id.label("owned_by"),
            owner.name.label("owner_name"),
            CheckoutModel.checkout_id,
            CheckoutModel.checked_out_by,
            borrower.name.label("checked_out_by_name"),
            CheckoutModel.checked_out_at,
        )
        .join(owner, owner.user_id == BookModel.user_id)
        .outerjoin(
            CheckoutModel,
            and_(
                CheckoutModel.book_id == BookModel.book_id,
                CheckoutModel.returned_at.is_(None),
            ),
        )
        .outerjoin(borrower, borrower.user_id == CheckoutModel.checked_out_by)
        .order_by(BookModel.created_at.desc(), BookModel.book_id.desc())
    )


class BookRepository:
    """
    Repository for book CRUD operations.

    Usage:
        repo = BookRepository(pool)

        book_id = await repo.create(
            CreateBook(title="Dune", author="Frank Herbert",
                       isbn="9780441172719", description="..."),
            owner_id,
        )
        page = await repo.find_all(BookListOptions(limit=20, offset=0))
    """

    def __init__(self, pool: ConnectionPool):
        self.pool = pool

    async def create(self, event: CreateBook, user_id: UUID) -> UUID:
        """
        Insert a new book owned by ``user_id``.

        Returns:
            Generated book id

        Raises:
            PersistenceError: On any database failure, including an
                unknown owner
        """
        book_id = uuid4()
        stmt = insert(BookModel).values(
            book_id=book_id,
            title=event.title,
            author=event.author,
            isbn=event.isbn,
            description=event.description,
            user_id=user_id,
        )
        async with self.pool.begin("create book") as session:
            await session.execute(stmt)

        logger.info(f"Book created: {book_id} (owner {user_id})")
        return book_id

    async def find_all(self, options: BookListOptions) -> PaginatedList[Book]:
        """
        List books, newest first.

        Args:
            options: limit/offset of the page

        Returns:
            PaginatedList whose total is the size of the whole set
        """
        limit, offset = options.limit, options.offset

        window = (
            select(
                func.count().over().label("total"),
                BookModel.book_id,
            )
            .order_by(BookModel.created_at.desc(), BookModel.book_id.desc())
            .limit(limit)
            .offset(offset)
        )

        async with self.pool.begin("list books") as session:
            rows = (await session.execute(window)).all()

            if rows:
                total = rows[0].total
            elif offset > 0:
                # Page past the end: no row carries the window count
                total = (
                    await session.execute(select(func.count()).select_from(BookModel))
                ).scalar_one()
            else:
                total = 0

            book_ids = [row.book_id for row in rows]
            items = []
            if book_ids:
                detail = book_detail_query().where(BookModel.book_id.in_(book_ids))
                items = [Book.from_row(row) for row in (await session.execute(detail)).all()]

        return PaginatedList(total=total, limit=limit, offset=offset, items=items)

    async def find_by_id(self, book_id: UUID) -> Optional[Book]:
        """
        Get book by ID.

        Returns:
            Book or None
        """
        stmt = book_detail_query().where(BookModel.book_id == book_id)
        async with self.pool.begin("find book") as session:
            row = (await session.execute(stmt)).first()

        if row:
            return Book.from_row(row)
        return None

    async def update(self, event: UpdateBook) -> None:
        """
        Update a book owned by the requesting user.

        Raises:
            EntityNotFound: Book does not exist or belongs to someone else
        """
        stmt = (
            update(BookModel)
            .where(
                BookModel.book_id == event.book_id,
                BookModel.user_id == event.requested_user,
            )
            .values(
                title=event.title,
                author=event.author,
                isbn=event.isbn,
                description=event.description,
            )
            .execution_options(synchronize_session=False)
        )
        async with self.pool.begin("update book") as session:
            result = await session.execute(stmt)
            if result.rowcount < 1:
                raise EntityNotFound("Specified book not found")

        logger.info(f"Book updated: {event.book_id}")

    async def delete(self, event: DeleteBook) -> None:
        """
        Delete a book owned by the requesting user.

        Checkouts of the book are removed with it.

        Raises:
            EntityNotFound: Book does not exist or belongs to someone else
        """
        stmt = (
            delete(BookModel)
            .where(
                BookModel.book_id == event.book_id,
                BookModel.user_id == event.requested_user,
            )
            .execution_options(synchronize_session=False)
        )
        async with self.pool.begin("delete book") as session:
            result = await session.execute(stmt)
            if result.rowcount < 1:
                raise EntityNotFound("Specified book not found")

        logger.info(f"Book deleted: {event.book_id}")
