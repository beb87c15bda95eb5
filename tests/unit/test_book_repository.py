"""
Tests for BookRepository.
"""

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest
from sqlalchemy import insert

from lendshelf.errors import EntityNotFound, PersistenceError
from lendshelf.storage import BookListOptions, CreateBook, DeleteBook, UpdateBook
from lendshelf.storage.models import BookModel

pytestmark = pytest.mark.asyncio


async def _insert_books(pool, owner_id, count: int):
    """Insert numbered books with strictly increasing created_at."""
    base = datetime(2024, 1, 1, tzinfo=timezone.utc)
    rows = [
        {
            "book_id": uuid4(),
            "title": f"title{i:03d}",
            "author": f"author{i:03d}",
            "isbn": f"isbn{i:03d}",
            "description": f"description{i:03d}",
            "user_id": owner_id,
            "created_at": base + timedelta(seconds=i),
        }
        for i in range(1, count + 1)
    ]
    async with pool.begin("seed books") as session:
        await session.execute(insert(BookModel), rows)


class TestRegisterAndFind:
    """Tests for create, find_all and find_by_id."""

    async def test_created_book_is_listed_once(self, book_repository, owner, sample_book):
        """A new book appears exactly once with its fields and owner."""
        book_id = await book_repository.create(sample_book, owner.id)

        page = await book_repository.find_all(BookListOptions(limit=100, offset=0))

        matches = [b for b in page.items if b.id == book_id]
        assert len(matches) == 1
        book = matches[0]
        assert book.title == sample_book.title
        assert book.author == sample_book.author
        assert book.isbn == sample_book.isbn
        assert book.description == sample_book.description
        assert book.owner.id == owner.id
        assert book.owner.name == owner.name
        assert book.checkout is None

    async def test_find_by_id(self, book_repository, owner, sample_book):
        """Test fetching a single book by ID."""
        book_id = await book_repository.create(sample_book, owner.id)

        book = await book_repository.find_by_id(book_id)

        assert book is not None
        assert book.id == book_id
        assert book.title == sample_book.title

    async def test_find_by_id_missing(self, book_repository):
        """Unknown ids return None rather than raising."""
        assert await book_repository.find_by_id(uuid4()) is None

    async def test_create_with_unknown_owner_fails(self, book_repository, sample_book):
        """The owner foreign key is enforced."""
        with pytest.raises(PersistenceError):
            await book_repository.create(sample_book, uuid4())


class TestPagination:
    """Tests for find_all totals and paging."""

    async def test_empty_set(self, book_repository):
        page = await book_repository.find_all(BookListOptions(limit=10, offset=0))

        assert page.total == 0
        assert page.items == []

    async def test_empty_set_with_offset(self, book_repository):
        page = await book_repository.find_all(BookListOptions(limit=10, offset=20))

        assert page.total == 0
        assert page.items == []

    async def test_first_page(self, pool, book_repository, owner):
        """Newest book first; total counts every book."""
        await _insert_books(pool, owner.id, 50)

        page = await book_repository.find_all(BookListOptions(limit=10, offset=0))

        assert page.total == 50
        assert page.limit == 10
        assert page.offset == 0
        assert len(page.items) == 10
        assert page.items[0].title == "title050"
        assert page.items[-1].title == "title041"

    async def test_second_page(self, pool, book_repository, owner):
        await _insert_books(pool, owner.id, 50)

        page = await book_repository.find_all(BookListOptions(limit=10, offset=10))

        assert page.total == 50
        assert len(page.items) == 10
        assert page.items[0].title == "title040"

    async def test_partial_last_page(self, pool, book_repository, owner):
        await _insert_books(pool, owner.id, 25)

        page = await book_repository.find_all(BookListOptions(limit=10, offset=20))

        assert page.total == 25
        assert [b.title for b in page.items] == [
            "title005", "title004", "title003", "title002", "title001",
        ]

    async def test_offset_past_end_keeps_true_total(self, pool, book_repository, owner):
        """A page past the end is empty but still reports the full count."""
        await _insert_books(pool, owner.id, 50)

        page = await book_repository.find_all(BookListOptions(limit=10, offset=100))

        assert page.items == []
        assert page.total == 50

    async def test_items_never_exceed_limit(self, pool, book_repository, owner):
        await _insert_books(pool, owner.id, 7)

        for limit, offset in [(1, 0), (3, 2), (5, 5), (10, 0), (2, 6)]:
            page = await book_repository.find_all(BookListOptions(limit=limit, offset=offset))
            assert page.total == 7
            assert len(page.items) <= limit


class TestOwnerScopedMutation:
    """Update and delete only succeed for the owner."""

    def _update(self, book_id, user_id, author="X"):
        return UpdateBook(
            book_id=book_id,
            title="The Great Gatsby",
            author=author,
            isbn="9780743273565",
            description="A story of decadence and excess in the Jazz Age.",
            requested_user=user_id,
        )

    async def test_update_by_owner(self, book_repository, owner, sample_book):
        book_id = await book_repository.create(sample_book, owner.id)

        await book_repository.update(self._update(book_id, owner.id, author="X"))

        book = await book_repository.find_by_id(book_id)
        assert book.author == "X"

    async def test_update_missing_book(self, book_repository, owner):
        with pytest.raises(EntityNotFound):
            await book_repository.update(self._update(uuid4(), owner.id))

    async def test_update_by_non_owner(self, book_repository, owner, borrower, sample_book):
        """Another user's book looks absent."""
        book_id = await book_repository.create(sample_book, owner.id)

        with pytest.raises(EntityNotFound):
            await book_repository.update(self._update(book_id, borrower.id))

        book = await book_repository.find_by_id(book_id)
        assert book.author == sample_book.author

    async def test_delete_by_owner(self, book_repository, owner, sample_book):
        book_id = await book_repository.create(sample_book, owner.id)

        await book_repository.delete(DeleteBook(book_id=book_id, requested_user=owner.id))

        assert await book_repository.find_by_id(book_id) is None

    async def test_delete_missing_book(self, book_repository, owner):
        with pytest.raises(EntityNotFound):
            await book_repository.delete(DeleteBook(book_id=uuid4(), requested_user=owner.id))

    async def test_delete_by_non_owner(self, book_repository, owner, borrower, sample_book):
        book_id = await book_repository.create(sample_book, owner.id)

        with pytest.raises(EntityNotFound):
            await book_repository.delete(DeleteBook(book_id=book_id, requested_user=borrower.id))

        assert await book_repository.find_by_id(book_id) is not None


async def test_book_lifecycle(book_repository, owner):
    """Create, list, fetch, update, delete."""
    event = CreateBook(
        title="Dune",
        author="Frank Herbert",
        isbn="9780441172719",
        description="Desert planet.",
    )
    book_id = await book_repository.create(event, owner.id)

    page = await book_repository.find_all(BookListOptions(limit=20, offset=0))
    assert page.total == 1
    assert len(page.items) == 1
    assert page.items[0].id == book_id

    book = await book_repository.find_by_id(book_id)
    assert (book.title, book.author, book.isbn, book.description) == (
        event.title, event.author, event.isbn, event.description,
    )

    await book_repository.update(
        UpdateBook(
            book_id=book_id,
            title=event.title,
            author="X",
            isbn=event.isbn,
            description=event.description,
            requested_user=owner.id,
        )
    )
    assert (await book_repository.find_by_id(book_id)).author == "X"

    await book_repository.delete(DeleteBook(book_id=book_id, requested_user=owner.id))
    assert await book_repository.find_by_id(book_id) is None
