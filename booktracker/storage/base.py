"""Storage backend contract shared by the persistent and in-memory backends."""

from abc import ABC, abstractmethod
from typing import Any, NamedTuple, Sequence

# Hard limit on delete requests per physical batch call.
MAX_BATCH_DELETE = 25

Item = dict[str, Any]


class DeleteRequest(NamedTuple):
    """Primary key of a row to delete."""

    pk: str
    sk: str


class StorageBackend(ABC):
    """Abstract key-value table with partitioned range queries.

    Implementations raise :class:`booktracker.errors.StorageError` for any
    transport or availability failure and never retry.
    """

    max_batch_delete: int = MAX_BATCH_DELETE

    @abstractmethod
    async def get_item(self, pk: str, sk: str) -> Item | None:
        """Fetch a single item by its full key.

        Returns:
            The stored item, or None if no item has that key.
        """

    @abstractmethod
    async def query(
        self,
        pk: str,
        sk_prefix: str,
        *,
        limit: int | None = None,
        scan_forward: bool = True,
    ) -> list[Item]:
        """Return the items in partition ``pk`` whose range key starts with ``sk_prefix``.

        Args:
            pk: Partition key.
            sk_prefix: Range key prefix.
            limit: Maximum number of items to return; None returns all.
            scan_forward: Ascending range key order when True, descending
                when False.

        Returns:
            Matching items ordered by range key.
        """

    @abstractmethod
    async def put_item(self, item: Item) -> None:
        """Write ``item``, replacing any existing item with the same key."""

    @abstractmethod
    async def batch_delete(self, requests: Sequence[DeleteRequest]) -> None:
        """Delete up to :attr:`max_batch_delete` items in one call.

        Raises:
            BatchDeleteIncompleteError: If only part of the batch was
                committed; it lists the keys that are still present.
        """
