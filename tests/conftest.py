"""Shared test fixtures."""
from __future__ import annotations

from dataclasses import dataclass, field

import pytest

from messaging_service.application.dto.message import MessageFilterDTO
from messaging_service.domain.entities.message import Message
from messaging_service.domain.value_objects.ids import MessageId


def make_message(
    *,
    message_id: int | None = None,
    to: str = "bob",
    sender: str = "alice",
    subject: str = "Hi",
    body: str = "hello",
    is_read: bool = False,
    parent_id: int | None = None,
) -> Message:
    return Message(
        id=MessageId(message_id) if message_id is not None else None,
        to=to,
        sender=sender,
        subject=subject,
        body=body,
        is_read=is_read,
        parent_id=MessageId(parent_id) if parent_id is not None else None,
    )


@dataclass
class FakeMessageReader:
    _store: dict[MessageId, Message] = field(default_factory=dict)

    async def get_by_id(self, message_id: MessageId) -> Message | None:
        return self._store.get(message_id)

    async def query(self, filters: MessageFilterDTO) -> list[Message]:
        result = []
        for m in self._store.values():
            if filters.to is not None and m.to != filters.to:
                continue
            if filters.sender is not None and m.sender != filters.sender:
                continue
            if filters.parent_id is not None and m.parent_id != filters.parent_id:
                continue
            if filters.roots_only and not m.is_root:
                continue
            if filters.is_read is not None and m.is_read != filters.is_read:
                continue
            result.append(m)
        return sorted(result, key=lambda m: m.id)


@dataclass
class FakeMessageWriter:
    _reader: FakeMessageReader
    _next_id: int = 1
    deleted: list[MessageId] = field(default_factory=list)

    async def add(self, message: Message) -> Message:
        stored = Message(
            id=MessageId(self._next_id),
            to=message.to,
            sender=message.sender,
            subject=message.subject,
            body=message.body,
            is_read=message.is_read,
            parent_id=message.parent_id,
        )
        self._next_id += 1
        self._reader._store[stored.id] = stored
        return stored

    async def update(self, message: Message) -> Message | None:
        if message.id not in self._reader._store:
            return None
        self._reader._store[message.id] = message
        return message

    async def delete(self, message_id: MessageId) -> bool:
        self.deleted.append(message_id)
        return self._reader._store.pop(message_id, None) is not None

    def put(self, message: Message) -> Message:
        """Store a message with a preset id, bypassing the service checks."""
        assert message.id is not None
        self._reader._store[message.id] = message
        self._next_id = max(self._next_id, message.id + 1)
        return message


@dataclass
class FakeUoW:
    """In-memory UoW for unit tests."""
    messages: FakeMessageReader = field(default_factory=FakeMessageReader)
    messages_w: FakeMessageWriter | None = None
    commits: int = 0

    def __post_init__(self) -> None:
        if self.messages_w is None:
            self.messages_w = FakeMessageWriter(self.messages)

    @property
    def _committed(self) -> bool:
        return self.commits > 0

    async def flush(self) -> None:
        pass

    async def commit(self) -> None:
        self.commits += 1

    async def rollback(self) -> None:
        pass


@pytest.fixture
def uow() -> FakeUoW:
    return FakeUoW()
