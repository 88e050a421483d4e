"""Book tracking use cases on top of the repository."""

import logging

from booktracker.models import Book, BookCreate, BookUpdate, Note, ReadingEvent
from booktracker.models.common import new_id, utc_now
from booktracker.storage.repository import BookRepository, BookSort

logger = logging.getLogger(__name__)


class BookService:
    """Creates and updates books, notes and reading progress for one caller.

    Request handlers depend on this class; they never see storage keys.

    Args:
        repository: The repository to read from and write to.
    """

    def __init__(self, repository: BookRepository) -> None:
        self._repository = repository

    async def create_book(self, owner_id: str, data: BookCreate) -> Book:
        """Store a new book with a fresh id and equal created and updated times.

        Args:
            owner_id: Owner of the new book.
            data: Validated client-supplied fields.

        Returns:
            The stored book.
        """
        now = utc_now()
        book = Book(id=new_id(), owner_id=owner_id, created_at=now, updated_at=now, **data.model_dump())
        await self._repository.put_book(book)
        logger.info("Created book %s for %s", book.id, owner_id)
        return book

    async def get_book(self, owner_id: str, book_id: str) -> Book | None:
        """Return the book, or None if the owner has no such book."""
        return await self._repository.get_book(owner_id, book_id)

    async def list_books(
        self,
        owner_id: str,
        status: str | None = None,
        sort: BookSort = "updatedAt_desc",
    ) -> list[Book]:
        """List the owner's books, optionally filtered by status."""
        return await self._repository.list_books(owner_id, status=status, sort=sort)

    async def update_book(self, owner_id: str, book_id: str, data: BookUpdate) -> Book | None:
        """Apply the fields set on ``data``.

        An update that sets nothing returns the current book without
        writing, so ``updated_at`` is left alone.
        """
        if data.is_empty():
            return await self._repository.get_book(owner_id, book_id)
        return await self._repository.update_book(owner_id, book_id, data)

    async def delete_book(self, owner_id: str, book_id: str) -> bool:
        """Delete a book with its notes and reading events.

        Returns:
            True if the book existed, False otherwise.
        """
        return await self._repository.delete_book(owner_id, book_id)

    async def create_note(self, owner_id: str, book_id: str, content: str) -> Note | None:
        """Attach a note to an existing book.

        Returns:
            The new note, or None if the book does not exist.
        """
        if await self._repository.get_book(owner_id, book_id) is None:
            return None
        now = utc_now()
        note = Note(
            id=new_id(),
            book_id=book_id,
            owner_id=owner_id,
            content=content,
            created_at=now,
            updated_at=now,
        )
        await self._repository.put_note(note)
        return note

    async def list_notes(self, owner_id: str, book_id: str) -> list[Note]:
        """Return the notes of a book, or an empty list if the book does not exist."""
        if await self._repository.get_book(owner_id, book_id) is None:
            return []
        return await self._repository.list_notes(owner_id, book_id)

    async def record_page(
        self, owner_id: str, book_id: str, page: int
    ) -> tuple[ReadingEvent, Book] | None:
        """Record reading progress and move the book's bookmark.

        Appends a ReadingEvent, then sets the book's ``current_page``.

        Returns:
            The new event and the updated book, or None if the book does
            not exist.
        """
        if await self._repository.get_book(owner_id, book_id) is None:
            return None

        event = ReadingEvent(id=new_id(), book_id=book_id, owner_id=owner_id, page=page)
        await self._repository.put_event(event)
        book = await self._repository.update_book(owner_id, book_id, BookUpdate(current_page=page))
        if book is None:
            # Deleted between the existence check and the update
            return None
        logger.info("Recorded page %d of book %s", page, book_id)
        return event, book

    async def list_reading_events(
        self, owner_id: str, book_id: str, limit: int | None = None
    ) -> list[ReadingEvent]:
        """Return a book's reading events, newest first."""
        if await self._repository.get_book(owner_id, book_id) is None:
            return []
        return await self._repository.list_events(owner_id, book_id, limit=limit, scan_forward=False)
