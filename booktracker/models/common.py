"""Field types shared by the domain models."""

from datetime import datetime, timedelta, timezone
from typing import Annotated
from uuid import uuid4

from pydantic import AfterValidator, Field


def utc_now() -> datetime:
    """Return the current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(uuid4())


def _as_utc(value: datetime) -> datetime:
    # Naive datetimes are taken to be UTC already
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


# Ids are embedded in '#'-delimited storage keys, so they may not contain '#'.
EntityId = Annotated[str, Field(min_length=1, pattern=r"^[^#]+$")]

UtcDatetime = Annotated[datetime, AfterValidator(_as_utc)]


def touch(previous: datetime) -> datetime:
    """Return a fresh timestamp strictly later than ``previous``."""
    now = utc_now()
    if now <= previous:
        return previous + timedelta(microseconds=1)
    return now
