"""
Checkout Repository for LendShelf

Lending and returning books. A checkout is open until returned_at is
set; a book has at most one open checkout, guarded here and by the
partial unique index on checkouts(book_id).
"""

from uuid import UUID, uuid4

from loguru import logger
from sqlalchemy import insert, select, update

from lendshelf.errors import EntityNotFound, UnprocessableResource
from .database import ConnectionPool
from .models import BookModel, CheckoutModel
from .records import Checkout, CreateCheckout, UpdateReturned


def _checkout_columns():
    return select(
        CheckoutModel.checkout_id,
        CheckoutModel.book_id,
        CheckoutModel.checked_out_by,
        CheckoutModel.checked_out_at,
        CheckoutModel.returned_by,
        CheckoutModel.returned_at,
    )


class CheckoutRepository:
    """Repository for checkout records."""

    def __init__(self, pool: ConnectionPool):
        self.pool = pool

    async def create(self, event: CreateCheckout) -> UUID:
        """
        Open a checkout for a book.

        Returns:
            Generated checkout id

        Raises:
            EntityNotFound: Book does not exist
            UnprocessableResource: Book already has an open checkout
        """
        checkout_id = uuid4()

        async with self.pool.begin("create checkout") as session:
            # Lock the book row so concurrent checkouts of it serialize (PostgreSQL)
            book = (
                await session.execute(
                    select(BookModel.book_id)
                    .where(BookModel.book_id == event.book_id)
                    .with_for_update()
                )
            ).first()
            if book is None:
                raise EntityNotFound(
                    "Specified book not found",
                    detail=f"No book with identifier '{event.book_id}' exists",
                )

            open_checkout = (
                await session.execute(
                    select(CheckoutModel.checkout_id).where(
                        CheckoutModel.book_id == event.book_id,
                        CheckoutModel.returned_at.is_(None),
                    )
                )
            ).first()
            if open_checkout is not None:
                raise UnprocessableResource(
                    "Specified book is already checked out",
                    detail=f"Open checkout: {open_checkout.checkout_id}",
                )

            await session.execute(
                insert(CheckoutModel).values(
                    checkout_id=checkout_id,
                    book_id=event.book_id,
                    checked_out_by=event.checked_out_by,
                    checked_out_at=event.checked_out_at,
                )
            )

        logger.info(f"Book {event.book_id} checked out by {event.checked_out_by} ({checkout_id})")
        return checkout_id

    async def update_returned(self, event: UpdateReturned) -> None:
        """
        Mark an open checkout as returned.

        Raises:
            EntityNotFound: No such checkout for that book
            UnprocessableResource: Checkout was already returned
        """
        async with self.pool.begin("return checkout") as session:
            current = (
                await session.execute(
                    select(CheckoutModel.returned_at)
                    .where(
                        CheckoutModel.checkout_id == event.checkout_id,
                        CheckoutModel.book_id == event.book_id,
                    )
                    .with_for_update()
                )
            ).first()
            if current is None:
                raise EntityNotFound(
                    "Specified checkout not found",
                    detail=f"No checkout '{event.checkout_id}' for book '{event.book_id}'",
                )
            if current.returned_at is not None:
                raise UnprocessableResource("Specified checkout has already been returned")

            await session.execute(
                update(CheckoutModel)
                .where(CheckoutModel.checkout_id == event.checkout_id)
                .values(returned_by=event.returned_by, returned_at=event.returned_at)
                .execution_options(synchronize_session=False)
            )

        logger.info(f"Checkout {event.checkout_id} returned by {event.returned_by}")

    async def find_unreturned_all(self) -> list[Checkout]:
        """All open checkouts, oldest first."""
        stmt = (
            _checkout_columns()
            .where(CheckoutModel.returned_at.is_(None))
            .order_by(CheckoutModel.checked_out_at.asc())
        )
        async with self.pool.begin("list open checkouts") as session:
            rows = (await session.execute(stmt)).all()
        return [Checkout.from_row(row) for row in rows]

    async def find_unreturned_by_user_id(self, user_id: UUID) -> list[Checkout]:
        """Open checkouts borrowed by one user, oldest first."""
        stmt = (
            _checkout_columns()
            .where(
                CheckoutModel.checked_out_by == user_id,
                CheckoutModel.returned_at.is_(None),
            )
            .order_by(CheckoutModel.checked_out_at.asc())
        )
        async with self.pool.begin("list user checkouts") as session:
            rows = (await session.execute(stmt)).all()
        return [Checkout.from_row(row) for row in rows]

    async def find_history_by_book_id(self, book_id: UUID) -> list[Checkout]:
        """Every checkout of a book, open or returned, newest first."""
        stmt = (
            _checkout_columns()
            .where(CheckoutModel.book_id == book_id)
            .order_by(CheckoutModel.checked_out_at.desc())
        )
        async with self.pool.begin("list checkout history") as session:
            rows = (await session.execute(stmt)).all()
        return [Checkout.from_row(row) for row in rows]
