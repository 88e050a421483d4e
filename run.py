"""Entry point for the Book Tracker storage layer."""

import logging

from booktracker.config import load_config
from booktracker.services import BookService
from booktracker.storage.dynamodb import DynamoDBBackend, initialize_table
from booktracker.storage.factory import create_backend
from booktracker.storage.repository import BookRepository

logger = logging.getLogger(__name__)


def build_service(config_path: str = "config.yaml") -> BookService:
    """Load configuration, select the backend once, and wire the service.

    When the DynamoDB backend is selected the table is created if it does
    not exist yet.
    """
    config = load_config(config_path)
    logging.basicConfig(level=config.logging.level, format=config.logging.format)

    backend = create_backend(config.storage)
    if isinstance(backend, DynamoDBBackend):
        initialize_table(backend.client, backend.table_name)

    repository = BookRepository(backend, default_event_limit=config.repository.default_event_limit)
    return BookService(repository)


def main() -> None:
    """Initialize storage for the configured deployment mode."""
    build_service()
    logger.info("Book Tracker storage ready")


if __name__ == "__main__":
    main()
