"""Reading progress event model."""

from pydantic import BaseModel, ConfigDict, Field

from booktracker.models.common import EntityId, UtcDatetime, new_id, utc_now


class ReadingEvent(BaseModel):
    """A single progress record: the reader reached ``page`` at ``occurred_at``.

    Events form an append-only log and are never modified once written.
    """

    model_config = ConfigDict(frozen=True)

    id: EntityId = Field(default_factory=new_id)
    book_id: EntityId
    owner_id: EntityId
    page: int = Field(ge=0)
    occurred_at: UtcDatetime = Field(default_factory=utc_now)
