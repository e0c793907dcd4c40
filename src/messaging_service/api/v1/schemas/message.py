from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from messaging_service.domain.entities.message import MAX_FIELD_LENGTH


class CreateMessageRequest(BaseModel):
    to: str = Field(min_length=1, max_length=MAX_FIELD_LENGTH)
    from_: str = Field(alias="from", min_length=1, max_length=MAX_FIELD_LENGTH)
    subject: str | None = Field(default=None, max_length=MAX_FIELD_LENGTH)
    body: str | None = None
    parent_message_id: int | None = Field(default=None, alias="parentMessageId")

    model_config = ConfigDict(populate_by_name=True)


class MessageResponse(BaseModel):
    """OpenAPI shape of a message tree; bodies are written by api.v1.serializer."""

    id: int
    to: str
    from_: str = Field(alias="from")
    subject: str
    body: str
    is_read: bool = Field(alias="isRead")
    parent_message_id: int | None = Field(default=None, alias="parentMessageId")
    children: list[MessageResponse] = Field(default_factory=list)


MessageResponse.model_rebuild()
