"""Single-table key scheme.

All of an owner's rows share one partition key; the range key is prefixed
by entity kind so each access pattern is a single ``begins_with`` query::

    pk = OWNER#<ownerId>
    sk = BOOK#<bookId>
         NOTE#<bookId>#<noteId>
         EVENT#<bookId>#<occurredAt>#<eventId>

``occurredAt`` is rendered with a fixed width so that lexical key order is
chronological order; the event id breaks ties between events recorded at
the same instant. Range keys must only ever be built through this module.
"""

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict

from booktracker.errors import InvalidKeyError, KeyDecodeError

DELIMITER = "#"
TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S.%fZ"

OWNER_PREFIX = "OWNER#"
BOOK_PREFIX = "BOOK#"


class EntityKind(str, Enum):
    BOOK = "BOOK"
    NOTE = "NOTE"
    EVENT = "EVENT"


class RangeKey(BaseModel):
    """A decoded range key."""

    model_config = ConfigDict(frozen=True)

    kind: EntityKind
    book_id: str
    child_id: str | None = None
    occurred_at: datetime | None = None


def _check_id(value: str, name: str) -> str:
    if not value:
        raise InvalidKeyError(f"{name} must not be empty")
    if DELIMITER in value:
        raise InvalidKeyError(f"{name} must not contain {DELIMITER!r}: {value!r}")
    return value


def format_timestamp(value: datetime) -> str:
    """Render a datetime as a fixed-width, lexically sortable UTC string."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime(TIMESTAMP_FORMAT)


def parse_timestamp(value: str) -> datetime:
    """Parse a key timestamp back into an aware UTC datetime.

    Raises:
        KeyDecodeError: If ``value`` is not in the key timestamp format.
    """
    try:
        parsed = datetime.strptime(value, TIMESTAMP_FORMAT)
    except ValueError as exc:
        raise KeyDecodeError(f"Malformed timestamp in key: {value!r}") from exc
    return parsed.replace(tzinfo=timezone.utc)


def partition_key(owner_id: str) -> str:
    """Partition key shared by all of an owner's rows."""
    return OWNER_PREFIX + _check_id(owner_id, "owner_id")


def book_key(book_id: str) -> str:
    """Range key of a book row."""
    return BOOK_PREFIX + _check_id(book_id, "book_id")


def note_prefix(book_id: str) -> str:
    """Range key prefix matching every note of a book."""
    return f"{EntityKind.NOTE.value}{DELIMITER}{_check_id(book_id, 'book_id')}{DELIMITER}"


def note_key(book_id: str, note_id: str) -> str:
    """Range key of a note row."""
    return note_prefix(book_id) + _check_id(note_id, "note_id")


def event_prefix(book_id: str) -> str:
    """Range key prefix matching every reading event of a book."""
    return f"{EntityKind.EVENT.value}{DELIMITER}{_check_id(book_id, 'book_id')}{DELIMITER}"


def event_key(book_id: str, occurred_at: datetime, event_id: str) -> str:
    """Range key of a reading event; sorts by ``occurred_at``, then ``event_id``.

    Raises:
        InvalidKeyError: If an id is empty or contains the delimiter.
    """
    return (
        event_prefix(book_id)
        + format_timestamp(occurred_at)
        + DELIMITER
        + _check_id(event_id, "event_id")
    )


def decode_partition_key(pk: str) -> str:
    """Extract the owner id from a partition key.

    Raises:
        KeyDecodeError: If ``pk`` is not an owner partition key.
    """
    owner_id = pk[len(OWNER_PREFIX):] if pk.startswith(OWNER_PREFIX) else ""
    if not owner_id or DELIMITER in owner_id:
        raise KeyDecodeError(f"Malformed partition key: {pk!r}")
    return owner_id


def decode_range_key(sk: str) -> RangeKey:
    """Extract the entity kind and ids from a range key.

    Args:
        sk: A range key produced by one of the ``*_key`` functions.

    Returns:
        The decoded key.

    Raises:
        KeyDecodeError: If ``sk`` does not match any known layout.
    """
    parts = sk.split(DELIMITER)
    if not all(parts):
        raise KeyDecodeError(f"Malformed range key: {sk!r}")

    kind, *ids = parts
    if kind == EntityKind.BOOK.value and len(ids) == 1:
        return RangeKey(kind=EntityKind.BOOK, book_id=ids[0])
    if kind == EntityKind.NOTE.value and len(ids) == 2:
        return RangeKey(kind=EntityKind.NOTE, book_id=ids[0], child_id=ids[1])
    if kind == EntityKind.EVENT.value and len(ids) == 3:
        return RangeKey(
            kind=EntityKind.EVENT,
            book_id=ids[0],
            child_id=ids[2],
            occurred_at=parse_timestamp(ids[1]),
        )
    raise KeyDecodeError(f"Malformed range key: {sk!r}")
