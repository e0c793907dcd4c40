from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from messaging_service.application.dto.message import MessageFilterDTO
from messaging_service.application.exceptions import StorageError
from messaging_service.domain.entities.message import Message
from messaging_service.domain.value_objects.ids import MessageId
from messaging_service.infrastructure.db.mappers import message as mapper
from messaging_service.infrastructure.db.models.message import MessageModel


class MessageReaderRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, message_id: MessageId) -> Message | None:
        result = await self._session.get(MessageModel, message_id)
        return mapper.model_to_entity(result) if result else None

    async def query(self, filters: MessageFilterDTO) -> list[Message]:
        stmt = select(MessageModel)
        if filters.to is not None:
            stmt = stmt.where(MessageModel.to == filters.to)
        if filters.sender is not None:
            stmt = stmt.where(MessageModel.sender == filters.sender)
        if filters.parent_id is not None:
            stmt = stmt.where(MessageModel.parent_id == filters.parent_id)
        if filters.roots_only:
            stmt = stmt.where(MessageModel.parent_id.is_(None))
        if filters.is_read is not None:
            stmt = stmt.where(MessageModel.is_read == filters.is_read)
        stmt = stmt.order_by(MessageModel.id.asc())
        result = await self._session.execute(stmt)
        return [mapper.model_to_entity(m) for m in result.scalars().all()]


class MessageWriterRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def _flush(self) -> None:
        try:
            await self._session.flush()
        except SQLAlchemyError as exc:
            await self._session.rollback()
            raise StorageError("Storage error") from exc

    async def add(self, message: Message) -> Message:
        model = mapper.entity_to_model(message)
        self._session.add(model)
        await self._flush()
        return mapper.model_to_entity(model)

    async def update(self, message: Message) -> Message | None:
        if message.id is None:
            return None
        model = await self._session.get(MessageModel, message.id)
        if model is None:
            return None
        # id, to, sender and parent_id never change after creation.
        model.subject = message.subject
        model.body = message.body
        model.is_read = message.is_read
        await self._flush()
        return mapper.model_to_entity(model)

    async def delete(self, message_id: MessageId) -> bool:
        model = await self._session.get(MessageModel, message_id)
        if model is None:
            return False
        await self._session.delete(model)
        await self._flush()
        return True
