"""Test doubles and builders shared across the test suite."""

import copy
from datetime import datetime, timedelta, timezone
from typing import Any, Sequence

from botocore.exceptions import ClientError, ParamValidationError

from booktracker.errors import StorageError
from booktracker.models import Book, BookStatus
from booktracker.storage.base import DeleteRequest, StorageBackend
from booktracker.storage.dynamodb import DynamoDBBackend
from booktracker.storage.memory import InMemoryBackend

TABLE_NAME = "BookTrackerTable"
T0 = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)


class FakeDynamoDBClient:
    """In-process stand-in for a boto3 DynamoDB client.

    Speaks the low-level attribute-value wire format and supports the
    calls the backend makes. ``page_size`` forces paginated query results.
    """

    def __init__(self, table_name: str = TABLE_NAME, page_size: int | None = None) -> None:
        self.table_name = table_name
        self.page_size = page_size
        self.rows: dict[tuple[str, str], dict[str, Any]] = {}
        self.calls: list[str] = []
        self.batch_sizes: list[int] = []
        self.fail_batch_on_call: int | None = None
        self.unprocessed_on_call: int | None = None
        # Leading requests of that call left undeleted
        self.unprocessed_count = 1

    @staticmethod
    def _key(key: dict[str, Any]) -> tuple[str, str]:
        return key["pk"]["S"], key["sk"]["S"]

    def get_item(self, TableName: str, Key: dict[str, Any], **kwargs: Any) -> dict[str, Any]:
        self.calls.append("get_item")
        item = self.rows.get(self._key(Key))
        return {"Item": copy.deepcopy(item)} if item is not None else {}

    def put_item(self, TableName: str, Item: dict[str, Any]) -> dict[str, Any]:
        self.calls.append("put_item")
        self.rows[self._key(Item)] = copy.deepcopy(Item)
        return {}

    def query(self, **kwargs: Any) -> dict[str, Any]:
        self.calls.append("query")
        values = kwargs["ExpressionAttributeValues"]
        pk, prefix = values[":pk"]["S"], values[":sk"]["S"]
        keys = sorted(
            (key for key in self.rows if key[0] == pk and key[1].startswith(prefix)),
            key=lambda key: key[1],
            reverse=not kwargs.get("ScanIndexForward", True),
        )
        if kwargs.get("Limit") is not None and kwargs["Limit"] < 1:
            raise ParamValidationError(report="Invalid value for parameter Limit, valid min value: 1")
        start = kwargs.get("ExclusiveStartKey")
        if start:
            keys = keys[keys.index(self._key(start)) + 1:]

        limits = [n for n in (kwargs.get("Limit"), self.page_size) if n is not None]
        page = keys[: min(limits)] if limits else keys
        response: dict[str, Any] = {
            "Items": [copy.deepcopy(self.rows[key]) for key in page],
            "Count": len(page),
        }
        if len(page) < len(keys):
            last_pk, last_sk = page[-1]
            response["LastEvaluatedKey"] = {"pk": {"S": last_pk}, "sk": {"S": last_sk}}
        return response

    def batch_write_item(self, RequestItems: dict[str, Any]) -> dict[str, Any]:
        self.calls.append("batch_write_item")
        requests = RequestItems[self.table_name]
        self.batch_sizes.append(len(requests))
        call_number = len(self.batch_sizes)
        if call_number == self.fail_batch_on_call:
            raise ClientError(
                {"Error": {"Code": "InternalServerError", "Message": "injected failure"}},
                "BatchWriteItem",
            )
        unprocessed = []
        if call_number == self.unprocessed_on_call:
            unprocessed = requests[: self.unprocessed_count]
        for request in requests[len(unprocessed):]:
            self.rows.pop(self._key(request["DeleteRequest"]["Key"]), None)
        return {"UnprocessedItems": {self.table_name: unprocessed} if unprocessed else {}}


class FailingBackend(InMemoryBackend):
    """In-memory backend whose Nth batch_delete call fails."""

    def __init__(self, fail_on_call: int) -> None:
        super().__init__()
        self.fail_on_call = fail_on_call

    async def batch_delete(self, requests: Sequence[DeleteRequest]) -> None:
        if len(self.batch_delete_calls) + 1 == self.fail_on_call:
            self.batch_delete_calls.append(len(requests))
            raise StorageError("injected failure")
        await super().batch_delete(requests)


def batch_sizes(backend: StorageBackend) -> list[int]:
    """Sizes of the batch delete calls a backend has received."""
    if isinstance(backend, DynamoDBBackend):
        return backend.client.batch_sizes
    return backend.batch_delete_calls


def make_book(owner_id: str = "user-1", **overrides: Any) -> Book:
    fields: dict[str, Any] = {
        "owner_id": owner_id,
        "title": "Dune",
        "status": BookStatus.READING,
        "created_at": T0,
        "updated_at": T0,
    }
    fields.update(overrides)
    return Book(**fields)


def minutes(n: int) -> datetime:
    return T0 + timedelta(minutes=n)


