"""Conversion between domain models and storage items."""

from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from booktracker.errors import CorruptItemError, KeyDecodeError
from booktracker.models import Book, Note, ReadingEvent
from booktracker.storage import keys
from booktracker.storage.keys import EntityKind

ModelT = TypeVar("ModelT", bound=BaseModel)

ENTITY_TYPE_ATTRIBUTE = "entity_type"
KEY_ATTRIBUTES = frozenset({"pk", "sk", ENTITY_TYPE_ATTRIBUTE})


def _to_item(record: BaseModel, pk: str, sk: str, kind: EntityKind) -> dict[str, Any]:
    # mode="json" writes every field, None included, with ISO timestamps
    return {
        "pk": pk,
        "sk": sk,
        ENTITY_TYPE_ATTRIBUTE: kind.value,
        **record.model_dump(mode="json"),
    }


def book_to_item(book: Book) -> dict[str, Any]:
    return _to_item(book, keys.partition_key(book.owner_id), keys.book_key(book.id), EntityKind.BOOK)


def note_to_item(note: Note) -> dict[str, Any]:
    return _to_item(
        note,
        keys.partition_key(note.owner_id),
        keys.note_key(note.book_id, note.id),
        EntityKind.NOTE,
    )


def event_to_item(event: ReadingEvent) -> dict[str, Any]:
    return _to_item(
        event,
        keys.partition_key(event.owner_id),
        keys.event_key(event.book_id, event.occurred_at, event.id),
        EntityKind.EVENT,
    )


def _from_item(model: type[ModelT], item: dict[str, Any], kind: EntityKind) -> ModelT:
    """Validate a stored item into ``model``.

    Optional attributes missing from the item are materialised as ``None``.
    Attributes without a ``None`` default must be present; an item lacking
    one, or whose keys disagree with its tag, is corrupt.
    """
    try:
        owner_id = keys.decode_partition_key(item["pk"])
        range_key = keys.decode_range_key(item["sk"])
    except (KeyError, KeyDecodeError) as exc:
        raise CorruptItemError(f"Stored {kind.value} item has invalid keys") from exc
    if range_key.kind is not kind or item.get(ENTITY_TYPE_ATTRIBUTE) != kind.value:
        raise CorruptItemError(f"Expected a {kind.value} item, got {item['sk']!r}")

    payload = {name: value for name, value in item.items() if name not in KEY_ATTRIBUTES}
    for name, field in model.model_fields.items():
        if name in payload:
            continue
        if field.is_required() or field.default is not None:
            raise CorruptItemError(f"Stored {kind.value} item {item['sk']!r} lacks {name!r}")
        payload[name] = None

    if payload.get("owner_id") != owner_id:
        raise CorruptItemError(f"Stored {kind.value} item {item['sk']!r} is in the wrong partition")

    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise CorruptItemError(f"Stored {kind.value} item {item['sk']!r} is invalid") from exc


def item_to_book(item: dict[str, Any]) -> Book:
    return _from_item(Book, item, EntityKind.BOOK)


def item_to_note(item: dict[str, Any]) -> Note:
    return _from_item(Note, item, EntityKind.NOTE)


def item_to_event(item: dict[str, Any]) -> ReadingEvent:
    return _from_item(ReadingEvent, item, EntityKind.EVENT)
