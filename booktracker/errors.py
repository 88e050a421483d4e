"""Exception hierarchy for the Book Tracker storage core."""

from typing import Sequence


class BookTrackerError(Exception):
    """Base class for all errors raised by this package."""


class StorageError(BookTrackerError):
    """The storage backend failed or was unreachable.

    Deliberately opaque: callers only learn that the operation did not
    complete. The original exception is chained as ``__cause__``.
    """


class BatchDeleteIncompleteError(StorageError):
    """A batch delete call committed only some of its requests.

    Args:
        unprocessed: ``(pk, sk)`` keys of the rows that were not deleted.
        attempted: Number of delete requests in the call.
    """

    def __init__(self, unprocessed: Sequence[tuple[str, str]], attempted: int) -> None:
        self.unprocessed = list(unprocessed)
        self.attempted = attempted
        super().__init__(f"{len(self.unprocessed)} of {attempted} deletes were not processed")


class CascadeIncompleteError(StorageError):
    """A cascade delete failed after some of its batches were committed.

    Args:
        book_id: The book whose cascade was interrupted.
        deleted: Number of rows already removed.
        remaining: Number of rows still present.
        book_deleted: Whether the book row itself is already gone.
    """

    def __init__(self, book_id: str, deleted: int, remaining: int, book_deleted: bool) -> None:
        self.book_id = book_id
        self.deleted = deleted
        self.remaining = remaining
        self.book_deleted = book_deleted
        super().__init__(
            f"Cascade delete of book {book_id} incomplete: "
            f"{deleted} rows deleted, {remaining} remaining"
        )


class InvalidKeyError(BookTrackerError, ValueError):
    """An id cannot be encoded into a storage key."""


class KeyDecodeError(BookTrackerError, ValueError):
    """A storage key string is malformed."""


class CorruptItemError(BookTrackerError):
    """A stored item could not be mapped back to a domain record."""
