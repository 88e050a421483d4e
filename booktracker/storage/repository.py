"""Entity-level repository over the single-table storage backend."""

import logging
from typing import Literal

from booktracker.errors import BatchDeleteIncompleteError, CascadeIncompleteError, StorageError
from booktracker.models import Book, BookUpdate, Note, ReadingEvent
from booktracker.models.common import touch
from booktracker.storage import keys, mapper
from booktracker.storage.base import DeleteRequest, StorageBackend

logger = logging.getLogger(__name__)

BookSort = Literal["updatedAt_asc", "updatedAt_desc"]
DEFAULT_EVENT_LIMIT = 50


class BookRepository:
    """Books, notes and reading events of every owner, in one table.

    Every operation is scoped by ``owner_id``: a record can only be reached
    by already knowing its owner and ids. Not-found is a result (None or
    False), never an exception. Storage failures propagate unchanged and
    are never retried.

    Args:
        backend: The storage backend, chosen once at start-up.
        default_event_limit: Cap applied by :meth:`list_events` when the
            caller gives none.
    """

    def __init__(self, backend: StorageBackend, default_event_limit: int = DEFAULT_EVENT_LIMIT) -> None:
        self._backend = backend
        self._default_event_limit = default_event_limit

    # ── Books ────────────────────────────────────────────────────────────

    async def put_book(self, book: Book) -> None:
        """Create or overwrite a book."""
        await self._backend.put_item(mapper.book_to_item(book))

    async def get_book(self, owner_id: str, book_id: str) -> Book | None:
        """Fetch one book, or None if it does not exist."""
        item = await self._backend.get_item(keys.partition_key(owner_id), keys.book_key(book_id))
        return mapper.item_to_book(item) if item is not None else None

    async def list_books(
        self,
        owner_id: str,
        status: str | None = None,
        sort: BookSort = "updatedAt_desc",
    ) -> list[Book]:
        """List an owner's books, newest update first unless asked otherwise.

        Key order is unrelated to ``updated_at``, so the result is always
        sorted explicitly.

        Args:
            owner_id: Owner whose books to list.
            status: Keep only books with exactly this status.
            sort: ``"updatedAt_desc"`` (default) or ``"updatedAt_asc"``.

        Returns:
            The matching books.

        Raises:
            ValueError: If ``sort`` is not a supported order.
        """
        if sort not in ("updatedAt_asc", "updatedAt_desc"):
            raise ValueError(f"Unsupported sort order: {sort!r}")

        items = await self._backend.query(keys.partition_key(owner_id), keys.BOOK_PREFIX)
        books = [mapper.item_to_book(item) for item in items]
        if status:
            books = [book for book in books if book.status.value == status]
        books.sort(key=lambda book: book.updated_at, reverse=sort == "updatedAt_desc")
        return books

    async def update_book(self, owner_id: str, book_id: str, changes: BookUpdate) -> Book | None:
        """Merge ``changes`` into a stored book.

        Read-modify-write with no version check: concurrent updates to the
        same book are last-writer-wins.

        Args:
            owner_id: Owner of the book.
            book_id: Book to update.
            changes: Fields to change; unset fields are left untouched.

        Returns:
            The updated book, or None if it does not exist.
        """
        existing = await self.get_book(owner_id, book_id)
        if existing is None:
            return None

        updated = existing.model_copy(
            update={**changes.changes(), "updated_at": touch(existing.updated_at)}
        )
        await self.put_book(updated)
        return updated

    async def delete_book(self, owner_id: str, book_id: str) -> bool:
        """Delete a book together with all of its notes and reading events.

        There are no multi-item transactions, so the delete runs as a saga:
        every target key is collected first, then the children are removed
        in sequential batches of at most ``max_batch_delete``. The book row
        is deleted on its own, only after every child batch has fully
        committed, so an interrupted cascade never leaves children behind
        a vanished book.

        Returns:
            True if the book existed and was deleted, False if it was not
            found (in which case nothing is written).

        Raises:
            StorageError: If the first batch fails without committing any
                row.
            CascadeIncompleteError: If a batch fails after at least one row
                was committed, including a batch that was only partly
                processed.
        """
        if await self.get_book(owner_id, book_id) is None:
            return False

        pk = keys.partition_key(owner_id)
        notes = await self._backend.query(pk, keys.note_prefix(book_id))
        events = await self._backend.query(pk, keys.event_prefix(book_id))

        children = [DeleteRequest(item["pk"], item["sk"]) for item in notes + events]
        book_request = DeleteRequest(pk, keys.book_key(book_id))

        size = self._backend.max_batch_delete
        batches = [children[start:start + size] for start in range(0, len(children), size)]
        batches.append([book_request])
        total = len(children) + 1

        deleted = 0
        for batch in batches:
            logger.debug("Deleting %d rows of book %s", len(batch), book_id)
            try:
                await self._backend.batch_delete(batch)
            except StorageError as exc:
                book_deleted = False
                if isinstance(exc, BatchDeleteIncompleteError):
                    deleted += len(batch) - len(exc.unprocessed)
                    book_deleted = book_request in batch and book_request not in exc.unprocessed
                if deleted == 0:
                    raise
                logger.warning(
                    "Cascade delete of book %s stopped after %d of %d rows",
                    book_id,
                    deleted,
                    total,
                )
                raise CascadeIncompleteError(
                    book_id,
                    deleted=deleted,
                    remaining=total - deleted,
                    book_deleted=book_deleted,
                ) from exc
            deleted += len(batch)

        logger.info(
            "Deleted book %s with %d notes and %d events", book_id, len(notes), len(events)
        )
        return True

    # ── Notes ────────────────────────────────────────────────────────────

    async def put_note(self, note: Note) -> None:
        """Create or overwrite a note."""
        await self._backend.put_item(mapper.note_to_item(note))

    async def list_notes(self, owner_id: str, book_id: str) -> list[Note]:
        """List a book's notes in key order."""
        items = await self._backend.query(keys.partition_key(owner_id), keys.note_prefix(book_id))
        return [mapper.item_to_note(item) for item in items]

    # ── Reading events ───────────────────────────────────────────────────

    async def put_event(self, event: ReadingEvent) -> None:
        """Append a reading event."""
        await self._backend.put_item(mapper.event_to_item(event))

    async def list_events(
        self,
        owner_id: str,
        book_id: str,
        limit: int | None = None,
        scan_forward: bool = True,
    ) -> list[ReadingEvent]:
        """List a book's reading events in chronological order.

        Args:
            owner_id: Owner of the book.
            book_id: Book whose events to list.
            limit: Maximum number of events; defaults to the repository's
                ``default_event_limit``.
            scan_forward: Oldest first when True, newest first when False.

        Returns:
            Up to ``limit`` events.

        Raises:
            ValueError: If ``limit`` is less than 1.
        """
        if limit is None:
            limit = self._default_event_limit
        if limit < 1:
            raise ValueError(f"limit must be at least 1, got {limit}")

        items = await self._backend.query(
            keys.partition_key(owner_id),
            keys.event_prefix(book_id),
            limit=limit,
            scan_forward=scan_forward,
        )
        return [mapper.item_to_event(item) for item in items]
