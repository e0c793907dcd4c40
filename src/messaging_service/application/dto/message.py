from __future__ import annotations

from dataclasses import dataclass, field

from messaging_service.application.exceptions import StorageError
from messaging_service.domain.entities.message import Message
from messaging_service.domain.value_objects.ids import MessageId


@dataclass(frozen=True, slots=True)
class MessageFilterDTO:
    """Conjunctive predicate over stored messages. ``None`` fields are ignored."""

    to: str | None = None
    sender: str | None = None
    parent_id: MessageId | None = None
    roots_only: bool = False
    is_read: bool | None = None


@dataclass(slots=True)
class MessageTreeDTO:
    id: MessageId
    to: str
    sender: str
    subject: str
    body: str
    is_read: bool
    parent_id: MessageId | None
    children: list[MessageTreeDTO] = field(default_factory=list)

    @classmethod
    def from_entity(cls, message: Message) -> MessageTreeDTO:
        return cls(
            id=stored_id(message),
            to=message.to,
            sender=message.sender,
            subject=message.subject,
            body=message.body,
            is_read=message.is_read,
            parent_id=message.parent_id,
        )


def stored_id(message: Message) -> MessageId:
    """Id of a persisted message. Unsaved entities never reach the read paths."""
    if message.id is None:
        raise StorageError("Message has not been persisted")
    return message.id
