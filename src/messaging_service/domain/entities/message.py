from __future__ import annotations

from dataclasses import dataclass

from messaging_service.domain.value_objects.ids import MessageId

# Width of the to / sender / subject columns.
MAX_FIELD_LENGTH = 255


@dataclass(frozen=True, slots=True)
class Message:
    id: MessageId | None
    to: str
    sender: str
    subject: str = ""
    body: str = ""
    is_read: bool = False
    parent_id: MessageId | None = None

    @property
    def is_root(self) -> bool:
        return self.parent_id is None
