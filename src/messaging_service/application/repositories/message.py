from __future__ import annotations

from typing import Protocol

from messaging_service.application.dto.message import MessageFilterDTO
from messaging_service.domain.entities.message import Message
from messaging_service.domain.value_objects.ids import MessageId


class MessageReader(Protocol):
    async def get_by_id(self, message_id: MessageId) -> Message | None: ...

    async def query(self, filters: MessageFilterDTO) -> list[Message]:
        """Return every message matching ``filters`` in insertion order."""
        ...


class MessageWriter(Protocol):
    async def add(self, message: Message) -> Message:
        """Insert message. Returns the stored entity with its assigned id."""
        ...

    async def update(self, message: Message) -> Message | None:
        """Persist mutable fields of an existing message. None if the id is unknown."""
        ...

    async def delete(self, message_id: MessageId) -> bool: ...
