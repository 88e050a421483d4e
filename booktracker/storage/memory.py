"""Volatile in-memory storage backend for local development and tests."""

import copy
from typing import Sequence

from booktracker.storage.base import DeleteRequest, Item, StorageBackend


class InMemoryBackend(StorageBackend):
    """Dict-backed table with the same contract as the DynamoDB backend.

    Items are copied on the way in and out so stored state cannot be
    mutated through a returned reference. Nothing persists across restarts
    and there is no locking; this backend is single-process only.
    """

    def __init__(self) -> None:
        self._items: dict[tuple[str, str], Item] = {}
        # Size of each batch_delete call, in order
        self.batch_delete_calls: list[int] = []

    def __len__(self) -> int:
        return len(self._items)

    async def get_item(self, pk: str, sk: str) -> Item | None:
        item = self._items.get((pk, sk))
        return copy.deepcopy(item) if item is not None else None

    async def query(
        self,
        pk: str,
        sk_prefix: str,
        *,
        limit: int | None = None,
        scan_forward: bool = True,
    ) -> list[Item]:
        matching = sorted(
            (key for key in self._items if key[0] == pk and key[1].startswith(sk_prefix)),
            key=lambda key: key[1],
            reverse=not scan_forward,
        )
        if limit is not None:
            matching = matching[:limit]
        return [copy.deepcopy(self._items[key]) for key in matching]

    async def put_item(self, item: Item) -> None:
        self._items[(item["pk"], item["sk"])] = copy.deepcopy(item)

    async def batch_delete(self, requests: Sequence[DeleteRequest]) -> None:
        self.batch_delete_calls.append(len(requests))
        for request in requests:
            self._items.pop((request.pk, request.sk), None)
