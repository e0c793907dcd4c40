from __future__ import annotations

from messaging_service.domain.entities.message import Message
from messaging_service.domain.value_objects.ids import MessageId
from messaging_service.infrastructure.db.models.message import MessageModel


def model_to_entity(model: MessageModel) -> Message:
    return Message(
        id=MessageId(model.id),
        to=model.to,
        sender=model.sender,
        subject=model.subject,
        body=model.body,
        is_read=model.is_read,
        parent_id=MessageId(model.parent_id) if model.parent_id is not None else None,
    )


def entity_to_model(entity: Message) -> MessageModel:
    return MessageModel(
        id=entity.id,
        to=entity.to,
        sender=entity.sender,
        subject=entity.subject,
        body=entity.body,
        is_read=entity.is_read,
        parent_id=entity.parent_id,
    )
