"""Book data models."""

from datetime import date
from enum import Enum

from pydantic import BaseModel, Field, field_validator, model_validator

from booktracker.models.common import EntityId, UtcDatetime, new_id, utc_now


class BookStatus(str, Enum):
    SHELF = "SHELF"
    READING = "READING"
    READ = "READ"


class BookFormat(str, Enum):
    PHYSICAL = "PHYSICAL"
    ELECTRONIC = "ELECTRONIC"


class Book(BaseModel):
    """A book on a user's shelf.

    Every optional attribute defaults to ``None`` so that a stored book
    always carries the full set of fields, explicitly null when unset.
    """

    id: EntityId = Field(default_factory=new_id)
    owner_id: EntityId
    title: str
    description: str | None = None
    status: BookStatus
    rating: int | None = Field(default=None, ge=1, le=5)
    current_page: int | None = Field(default=None, ge=0)
    total_pages: int | None = Field(default=None, ge=0)
    price: float | None = None
    currency: str | None = None
    store: str | None = None
    purchase_date: date | None = None
    bought_at: str | None = None
    image_url: str | None = None
    format: BookFormat | None = None
    created_at: UtcDatetime = Field(default_factory=utc_now)
    updated_at: UtcDatetime = Field(default_factory=utc_now)

    @model_validator(mode="after")
    def _updated_not_before_created(self) -> "Book":
        if self.updated_at < self.created_at:
            raise ValueError("updated_at must not be earlier than created_at")
        return self


class BookCreate(BaseModel):
    """Input for creating a book."""

    title: str = Field(min_length=1, max_length=500)
    description: str | None = Field(default=None, max_length=10000)
    status: BookStatus
    rating: int | None = Field(default=None, ge=1, le=5)
    current_page: int | None = Field(default=None, ge=0)
    total_pages: int | None = Field(default=None, ge=0)
    price: float | None = None
    currency: str | None = Field(default=None, max_length=3)
    store: str | None = Field(default=None, max_length=200)
    purchase_date: date | None = None
    bought_at: str | None = Field(default=None, max_length=200)
    image_url: str | None = None
    format: BookFormat | None = None


class BookUpdate(BaseModel):
    """A partial set of book changes.

    Only fields that were explicitly set are applied; a field explicitly
    set to ``None`` clears the stored value. ``title`` and ``status`` may
    be omitted but not cleared.
    """

    title: str | None = Field(default=None, min_length=1, max_length=500)
    description: str | None = Field(default=None, max_length=10000)
    status: BookStatus | None = None
    rating: int | None = Field(default=None, ge=1, le=5)
    current_page: int | None = Field(default=None, ge=0)
    total_pages: int | None = Field(default=None, ge=0)
    price: float | None = None
    currency: str | None = Field(default=None, max_length=3)
    store: str | None = Field(default=None, max_length=200)
    purchase_date: date | None = None
    bought_at: str | None = Field(default=None, max_length=200)
    image_url: str | None = None
    format: BookFormat | None = None

    @field_validator("title", "status")
    @classmethod
    def _not_clearable(cls, value: object) -> object:
        if value is None:
            raise ValueError("field cannot be cleared")
        return value

    def changes(self) -> dict:
        """Return only the explicitly supplied fields."""
        return self.model_dump(exclude_unset=True)

    def is_empty(self) -> bool:
        return not self.model_fields_set
