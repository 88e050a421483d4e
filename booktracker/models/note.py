"""Note data model."""

from pydantic import BaseModel, Field

from booktracker.models.common import EntityId, UtcDatetime, new_id, utc_now


class Note(BaseModel):
    """A free-text note attached to a book."""

    id: EntityId = Field(default_factory=new_id)
    book_id: EntityId
    owner_id: EntityId
    content: str = Field(min_length=1, max_length=10000)
    created_at: UtcDatetime = Field(default_factory=utc_now)
    updated_at: UtcDatetime = Field(default_factory=utc_now)
