"""Backend selection, made once at process start."""

import logging

from booktracker.config import StorageConfig
from booktracker.storage.base import StorageBackend
from booktracker.storage.dynamodb import DynamoDBBackend, get_client
from booktracker.storage.memory import InMemoryBackend

logger = logging.getLogger(__name__)

BACKENDS = ("memory", "dynamodb")


def create_backend(config: StorageConfig) -> StorageBackend:
    """Create the storage backend named by ``config.backend``.

    Args:
        config: Storage configuration, already resolved against the
            environment by :func:`booktracker.config.load_config`.

    Returns:
        A ready-to-use StorageBackend.

    Raises:
        ValueError: If the backend name is not supported.
    """
    if config.backend == "memory":
        logger.info("Using in-memory storage; data will not survive a restart")
        backend: StorageBackend = InMemoryBackend()
        backend.max_batch_delete = config.max_batch_delete
        return backend
    if config.backend == "dynamodb":
        logger.info("Using DynamoDB table %s", config.table_name)
        client = get_client(config.region, config.endpoint_url)
        return DynamoDBBackend(client, config.table_name, max_batch_delete=config.max_batch_delete)

    raise ValueError(
        f"Backend '{config.backend}' not supported. Available backends: {', '.join(BACKENDS)}"
    )
