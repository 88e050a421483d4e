"""Tests for the single-table key scheme."""

from datetime import datetime, timedelta, timezone

import pytest

from booktracker.errors import InvalidKeyError, KeyDecodeError
from booktracker.storage import keys
from booktracker.storage.keys import EntityKind

WHEN = datetime(2024, 5, 1, 12, 30, 15, 250000, tzinfo=timezone.utc)


class TestEncoding:
    def test_partition_key(self) -> None:
        assert keys.partition_key("user-1") == "OWNER#user-1"

    def test_book_key(self) -> None:
        assert keys.book_key("b1") == "BOOK#b1"

    def test_note_key(self) -> None:
        assert keys.note_key("b1", "n1") == "NOTE#b1#n1"
        assert keys.note_key("b1", "n1").startswith(keys.note_prefix("b1"))

    def test_event_key_embeds_fixed_width_timestamp(self) -> None:
        assert keys.event_key("b1", WHEN, "e1") == "EVENT#b1#2024-05-01T12:30:15.250000Z#e1"

    def test_event_key_normalises_to_utc(self) -> None:
        plus_two = WHEN.astimezone(timezone(timedelta(hours=2)))
        assert keys.event_key("b1", plus_two, "e1") == keys.event_key("b1", WHEN, "e1")

    def test_event_keys_sort_chronologically(self) -> None:
        times = [WHEN + timedelta(microseconds=n) for n in (0, 1, 999_999)]
        times += [WHEN + timedelta(days=400), WHEN - timedelta(seconds=1)]
        encoded = [keys.event_key("b1", t, "e") for t in times]
        assert sorted(encoded) == [keys.event_key("b1", t, "e") for t in sorted(times)]

    def test_same_instant_events_are_distinct(self) -> None:
        assert keys.event_key("b1", WHEN, "e1") != keys.event_key("b1", WHEN, "e2")

    def test_prefixes_do_not_overlap_between_books(self) -> None:
        # "b1" must not match the children of "b10"
        assert not keys.note_key("b10", "n1").startswith(keys.note_prefix("b1"))
        assert not keys.event_key("b10", WHEN, "e1").startswith(keys.event_prefix("b1"))

    @pytest.mark.parametrize("bad_id", ["", "a#b", "#", "trailing#"])
    def test_rejects_ids_that_break_the_delimiter(self, bad_id: str) -> None:
        with pytest.raises(InvalidKeyError):
            keys.book_key(bad_id)
        with pytest.raises(InvalidKeyError):
            keys.partition_key(bad_id)
        with pytest.raises(InvalidKeyError):
            keys.note_key("b1", bad_id)

    def test_invalid_key_error_is_a_value_error(self) -> None:
        with pytest.raises(ValueError):
            keys.event_key("b#1", WHEN, "e1")


class TestDecoding:
    def test_decode_partition_key(self) -> None:
        assert keys.decode_partition_key("OWNER#user-1") == "user-1"

    @pytest.mark.parametrize("pk", ["USER#user-1", "OWNER#", "OWNER#a#b", ""])
    def test_decode_partition_key_rejects_malformed(self, pk: str) -> None:
        with pytest.raises(KeyDecodeError):
            keys.decode_partition_key(pk)

    def test_decode_book_key(self) -> None:
        decoded = keys.decode_range_key(keys.book_key("b1"))
        assert decoded.kind is EntityKind.BOOK
        assert decoded.book_id == "b1"
        assert decoded.child_id is None

    def test_decode_note_key(self) -> None:
        decoded = keys.decode_range_key(keys.note_key("b1", "n1"))
        assert decoded.kind is EntityKind.NOTE
        assert (decoded.book_id, decoded.child_id) == ("b1", "n1")

    def test_decode_event_key(self) -> None:
        decoded = keys.decode_range_key(keys.event_key("b1", WHEN, "e1"))
        assert decoded.kind is EntityKind.EVENT
        assert (decoded.book_id, decoded.child_id) == ("b1", "e1")
        assert decoded.occurred_at == WHEN

    @pytest.mark.parametrize(
        "sk",
        [
            "",
            "BOOK#",
            "BOOK#b1#extra",
            "NOTE#b1",
            "NOTE##n1",
            "EVENT#b1#e1",
            "EVENT#b1#not-a-time#e1",
            "SHELF#b1",
        ],
    )
    def test_decode_rejects_malformed(self, sk: str) -> None:
        with pytest.raises(KeyDecodeError):
            keys.decode_range_key(sk)
