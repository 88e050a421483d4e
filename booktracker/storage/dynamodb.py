"""DynamoDB table provisioning and the persistent storage backend."""

import asyncio
import logging
from decimal import Decimal
from typing import Any, Sequence

import boto3
from boto3.dynamodb.types import TypeDeserializer, TypeSerializer
from botocore.exceptions import BotoCoreError, ClientError

from booktracker.errors import BatchDeleteIncompleteError, StorageError
from booktracker.storage.base import MAX_BATCH_DELETE, DeleteRequest, Item, StorageBackend

logger = logging.getLogger(__name__)

KEY_CONDITION = "pk = :pk AND begins_with(sk, :sk)"


def get_client(region: str | None = None, endpoint_url: str | None = None) -> Any:
    """Create a low-level DynamoDB client.

    Args:
        region: AWS region name; None uses the default resolution chain.
        endpoint_url: Override endpoint, e.g. a DynamoDB Local URL.

    Returns:
        A boto3 DynamoDB client.
    """
    return boto3.client("dynamodb", region_name=region, endpoint_url=endpoint_url)


def initialize_table(client: Any, table_name: str) -> None:
    """Create the single table if it doesn't exist.

    Args:
        client: A boto3 DynamoDB client.
        table_name: Name of the table to create.
    """
    try:
        client.describe_table(TableName=table_name)
        return
    except ClientError as exc:
        if exc.response.get("Error", {}).get("Code") != "ResourceNotFoundException":
            raise

    logger.info("Creating DynamoDB table %s", table_name)
    client.create_table(
        TableName=table_name,
        KeySchema=[
            {"AttributeName": "pk", "KeyType": "HASH"},
            {"AttributeName": "sk", "KeyType": "RANGE"},
        ],
        AttributeDefinitions=[
            {"AttributeName": "pk", "AttributeType": "S"},
            {"AttributeName": "sk", "AttributeType": "S"},
        ],
        BillingMode="PAY_PER_REQUEST",
    )
    client.get_waiter("table_exists").wait(TableName=table_name)


def _to_dynamo(value: Any) -> Any:
    # DynamoDB numbers must be Decimal; the serializer rejects floats
    if isinstance(value, float):
        return Decimal(str(value))
    if isinstance(value, dict):
        return {k: _to_dynamo(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_to_dynamo(v) for v in value]
    return value


def _from_dynamo(value: Any) -> Any:
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    if isinstance(value, dict):
        return {k: _from_dynamo(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_from_dynamo(v) for v in value]
    return value


class DynamoDBBackend(StorageBackend):
    """Persistent backend over a single DynamoDB table.

    boto3 is synchronous, so each call runs in a worker thread and the
    awaiting coroutine is suspended until DynamoDB answers.

    Args:
        client: A boto3 DynamoDB client.
        table_name: The single table holding all entities.
        max_batch_delete: Deletes per BatchWriteItem call, at most 25.
    """

    def __init__(self, client: Any, table_name: str, max_batch_delete: int = MAX_BATCH_DELETE) -> None:
        if not 1 <= max_batch_delete <= MAX_BATCH_DELETE:
            raise ValueError(f"max_batch_delete must be between 1 and {MAX_BATCH_DELETE}")
        self._client = client
        self._table_name = table_name
        self.max_batch_delete = max_batch_delete
        self._serializer = TypeSerializer()
        self._deserializer = TypeDeserializer()

    @property
    def client(self) -> Any:
        return self._client

    @property
    def table_name(self) -> str:
        return self._table_name

    def _serialize(self, item: Item) -> dict[str, Any]:
        return {k: self._serializer.serialize(_to_dynamo(v)) for k, v in item.items()}

    def _deserialize(self, raw: dict[str, Any]) -> Item:
        return {k: _from_dynamo(self._deserializer.deserialize(v)) for k, v in raw.items()}

    async def _call(self, operation: str, **kwargs: Any) -> dict[str, Any]:
        method = getattr(self._client, operation)
        try:
            return await asyncio.to_thread(method, **kwargs)
        except (BotoCoreError, ClientError) as exc:
            logger.error("DynamoDB %s on %s failed: %s", operation, self._table_name, exc)
            raise StorageError(f"DynamoDB {operation} failed") from exc

    async def get_item(self, pk: str, sk: str) -> Item | None:
        response = await self._call(
            "get_item",
            TableName=self._table_name,
            Key=self._serialize({"pk": pk, "sk": sk}),
            ConsistentRead=True,
        )
        raw = response.get("Item")
        return self._deserialize(raw) if raw else None

    async def query(
        self,
        pk: str,
        sk_prefix: str,
        *,
        limit: int | None = None,
        scan_forward: bool = True,
    ) -> list[Item]:
        params: dict[str, Any] = {
            "TableName": self._table_name,
            "KeyConditionExpression": KEY_CONDITION,
            "ExpressionAttributeValues": self._serialize({":pk": pk, ":sk": sk_prefix}),
            "ScanIndexForward": scan_forward,
        }
        items: list[Item] = []
        while True:
            if limit is not None:
                params["Limit"] = limit - len(items)
            response = await self._call("query", **params)
            items.extend(self._deserialize(raw) for raw in response.get("Items", []))

            last_key = response.get("LastEvaluatedKey")
            if not last_key or (limit is not None and len(items) >= limit):
                return items
            params["ExclusiveStartKey"] = last_key

    async def put_item(self, item: Item) -> None:
        await self._call("put_item", TableName=self._table_name, Item=self._serialize(item))

    async def batch_delete(self, requests: Sequence[DeleteRequest]) -> None:
        if not requests:
            return
        if len(requests) > self.max_batch_delete:
            raise ValueError(
                f"Batch of {len(requests)} deletes exceeds the limit of {self.max_batch_delete}"
            )

        response = await self._call(
            "batch_write_item",
            RequestItems={
                self._table_name: [
                    {"DeleteRequest": {"Key": self._serialize({"pk": r.pk, "sk": r.sk})}}
                    for r in requests
                ]
            },
        )
        unprocessed = response.get("UnprocessedItems", {}).get(self._table_name, [])
        if unprocessed:
            # Everything else in the batch is already committed
            logger.error(
                "DynamoDB left %d of %d deletes unprocessed on %s",
                len(unprocessed),
                len(requests),
                self._table_name,
            )
            remaining = [self._deserialize(entry["DeleteRequest"]["Key"]) for entry in unprocessed]
            raise BatchDeleteIncompleteError(
                [DeleteRequest(key["pk"], key["sk"]) for key in remaining],
                attempted=len(requests),
            )
