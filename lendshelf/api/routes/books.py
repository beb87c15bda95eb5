"""
Book API Routes

Registration, listing, lookup, update and deletion of books.
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request, Response, status
from loguru import logger

from lendshelf.api.dependencies import (
    CurrentUser,
    ServiceContainer,
    get_book_repository,
    get_service_container,
)
from lendshelf.api.schemas import (
    BookResponse,
    CreateBookRequest,
    ErrorResponse,
    UpdateBookRequest,
)
from lendshelf.errors import EntityNotFound, UnprocessableResource
from lendshelf.storage.records import BookListOptions, DeleteBook


router = APIRouter(prefix="/books", tags=["books"])


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_class=Response,
    responses={
        201: {"description": "Book registered; see Location header"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
    },
)
async def register_book(
    book: CreateBookRequest,
    request: Request,
    user: CurrentUser,
    repo = Depends(get_book_repository),
):
    """Register a new book owned by the caller."""
    logger.info(f"Registering book: {book.title} by {book.author}")

    book_id = await repo.create(book.to_command(), user.id)
    location = request.url_for("show_book", book_id=str(book_id))
    return Response(
        status_code=status.HTTP_201_CREATED,
        headers={"Location": location.path},
    )


@router.get(
    "",
    response_model=list[BookResponse],
    responses={
        422: {"model": ErrorResponse, "description": "Invalid paging parameters"},
    },
)
async def show_book_list(
    response: Response,
    limit: Optional[int] = Query(None, ge=1, description="Items per page"),
    offset: Optional[int] = Query(None, ge=0, description="Items to skip"),
    container: ServiceContainer = Depends(get_service_container),
):
    """List books newest first. The full count is returned in X-Total-Count."""
    settings = container.settings
    if limit is None:
        limit = settings.default_page_limit
    if limit > settings.max_page_limit:
        raise UnprocessableResource(
            "Invalid paging parameters",
            detail=f"limit must not exceed {settings.max_page_limit}",
        )

    page = await container.book_repository.find_all(
        BookListOptions(limit=limit, offset=offset or 0)
    )
    response.headers["X-Total-Count"] = str(page.total)
    return [BookResponse.from_book(book) for book in page.items]


@router.get(
    "/{book_id}",
    response_model=BookResponse,
    responses={
        404: {"model": ErrorResponse, "description": "Book not found"},
    },
)
async def show_book(
    book_id: UUID,
    repo = Depends(get_book_repository),
):
    """Get a book by ID, including its open checkout if any."""
    book = await repo.find_by_id(book_id)
    if book is None:
        raise EntityNotFound("Specified book not found")
    return BookResponse.from_book(book)


@router.put(
    "/{book_id}",
    response_class=Response,
    responses={
        404: {"model": ErrorResponse, "description": "Book not found or not owned by caller"},
    },
)
async def update_book(
    book_id: UUID,
    book: UpdateBookRequest,
    user: CurrentUser,
    repo = Depends(get_book_repository),
):
    """Replace a book's fields. Only the owner may update."""
    logger.info(f"Updating book: {book_id}")

    await repo.update(book.to_command(book_id, user.id))
    return Response(status_code=status.HTTP_200_OK)


@router.delete(
    "/{book_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses={
        404: {"model": ErrorResponse, "description": "Book not found or not owned by caller"},
    },
)
async def delete_book(
    book_id: UUID,
    user: CurrentUser,
    repo = Depends(get_book_repository),
):
    """Delete a book. Only the owner may delete."""
    logger.info(f"Deleting book: {book_id}")

    await repo.delete(DeleteBook(book_id=book_id, requested_user=user.id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
