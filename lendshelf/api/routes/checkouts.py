"""
Checkout API Routes

Borrowing and returning books, plus checkout listings.
"""

from datetime import datetime, timezone
from uuid import UUID

from fastapi import APIRouter, Depends, Response, status
from loguru import logger

from lendshelf.api.dependencies import CurrentUser, get_checkout_repository
from lendshelf.api.schemas import (
    CheckoutCreatedResponse,
    CheckoutResponse,
    ErrorResponse,
)
from lendshelf.storage.records import CreateCheckout, UpdateReturned


router = APIRouter(prefix="/books", tags=["checkouts"])


@router.get("/checkouts", response_model=list[CheckoutResponse])
async def show_checked_out_list(
    repo = Depends(get_checkout_repository),
):
    """All open checkouts, oldest first."""
    checkouts = await repo.find_unreturned_all()
    return [CheckoutResponse.from_checkout(c) for c in checkouts]


@router.post(
    "/{book_id}/checkouts",
    response_model=CheckoutCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        404: {"model": ErrorResponse, "description": "Book not found"},
        422: {"model": ErrorResponse, "description": "Book already checked out"},
    },
)
async def checkout_book(
    book_id: UUID,
    user: CurrentUser,
    repo = Depends(get_checkout_repository),
):
    """Check a book out to the caller."""
    logger.info(f"User {user.id} checking out book {book_id}")

    checkout_id = await repo.create(
        CreateCheckout(
            book_id=book_id,
            checked_out_by=user.id,
            checked_out_at=datetime.now(timezone.utc),
        )
    )
    return CheckoutCreatedResponse(id=checkout_id)


@router.put(
    "/{book_id}/checkouts/{checkout_id}/returned",
    response_class=Response,
    responses={
        404: {"model": ErrorResponse, "description": "Checkout not found"},
        422: {"model": ErrorResponse, "description": "Checkout already returned"},
    },
)
async def return_book(
    book_id: UUID,
    checkout_id: UUID,
    user: CurrentUser,
    repo = Depends(get_checkout_repository),
):
    """Mark a checkout as returned by the caller."""
    logger.info(f"User {user.id} returning checkout {checkout_id}")

    await repo.update_returned(
        UpdateReturned(
            checkout_id=checkout_id,
            book_id=book_id,
            returned_by=user.id,
            returned_at=datetime.now(timezone.utc),
        )
    )
    return Response(status_code=status.HTTP_200_OK)


@router.get("/{book_id}/checkout-history", response_model=list[CheckoutResponse])
async def checkout_history(
    book_id: UUID,
    repo = Depends(get_checkout_repository),
):
    """Every checkout of a book, newest first."""
    checkouts = await repo.find_history_by_book_id(book_id)
    return [CheckoutResponse.from_checkout(c) for c in checkouts]
