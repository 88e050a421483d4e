"""Configuration loader for the Book Tracker application."""

import os
from pathlib import Path
from typing import Literal

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field

from booktracker.storage.base import MAX_BATCH_DELETE


class AppInfo(BaseModel):
    """Application metadata."""

    name: str = "Book Tracker"
    version: str = "1.0.0"


class StorageConfig(BaseModel):
    """Storage backend configuration."""

    backend: Literal["memory", "dynamodb"] = "memory"
    table_name: str = "BookTrackerTable"
    region: str | None = None
    endpoint_url: str | None = None
    max_batch_delete: int = Field(default=MAX_BATCH_DELETE, ge=1, le=MAX_BATCH_DELETE)


class RepositoryConfig(BaseModel):
    """Repository query defaults."""

    default_event_limit: int = Field(default=50, ge=1)


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    format: str = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class AppConfig(BaseModel):
    """Root application configuration."""

    app: AppInfo = Field(default_factory=AppInfo)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    repository: RepositoryConfig = Field(default_factory=RepositoryConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def _is_truthy(value: str | None) -> bool:
    return value is not None and value.strip().lower() in ("1", "true")


def load_config(config_path: str | Path = "config.yaml") -> AppConfig:
    """Load configuration from YAML file and environment variables.

    The storage backend is resolved here, once: ``LOCAL_DEV=1`` (or
    ``true``) forces the in-memory backend, a ``TABLE_NAME`` selects
    DynamoDB, and with neither set the in-memory backend is used.
    ``storage.backend`` is therefore never read from the YAML file.

    Args:
        config_path: Path to the YAML configuration file.

    Returns:
        Fully populated AppConfig instance.
    """
    load_dotenv()

    yaml_data: dict = {}
    config_file = Path(config_path)
    if config_file.exists():
        with open(config_file) as f:
            yaml_data = yaml.safe_load(f) or {}

    config = AppConfig(**yaml_data)

    # Deployment environment overrides the file
    table_name = os.getenv("TABLE_NAME")
    if table_name:
        config.storage.table_name = table_name
    if _is_truthy(os.getenv("LOCAL_DEV")) or not table_name:
        config.storage.backend = "memory"
    else:
        config.storage.backend = "dynamodb"

    region = os.getenv("AWS_REGION")
    if region:
        config.storage.region = region
    endpoint_url = os.getenv("DYNAMODB_ENDPOINT_URL")
    if endpoint_url:
        config.storage.endpoint_url = endpoint_url
    log_level = os.getenv("LOG_LEVEL")
    if log_level:
        config.logging.level = log_level.upper()

    return config
