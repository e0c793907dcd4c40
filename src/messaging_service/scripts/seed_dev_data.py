"""Seed development data: a small reply tree and a second root message."""
from __future__ import annotations

import asyncio
import logging

from messaging_service.application.uow import UnitOfWork
from messaging_service.config import settings
from messaging_service.domain.entities.message import Message
from messaging_service.infrastructure.db.session import (
    build_engine,
    build_session_factory,
    create_schema,
)
from messaging_service.infrastructure.db.uow import SqlAlchemyUoW
from messaging_service.logging_config import setup_logging
from messaging_service.services import message_service

logger = logging.getLogger(__name__)


async def seed(uow: UnitOfWork) -> list[Message]:
    """Create the sample messages. Returns them in creation order."""
    root = await message_service.create_message(
        "bob", "alice", "Lunch on Friday?", "Are you free around noon?", None, uow,
    )
    reply = await message_service.create_message(
        "alice", "bob", "Re: Lunch on Friday?", "Sure, the usual place?", root.id, uow,
    )
    nested = await message_service.create_message(
        "bob", "alice", "Re: Re: Lunch on Friday?", "Yes. See you there.", reply.id, uow,
    )
    other = await message_service.create_message(
        "carol", "alice", "Quarterly report", "Draft attached for review.", None, uow,
    )
    return [root, reply, nested, other]


async def _main() -> None:
    engine = build_engine(settings)
    try:
        await create_schema(engine)
        session_factory = build_session_factory(engine)
        async with session_factory() as session:
            async with SqlAlchemyUoW(session) as uow:
                created = await seed(uow)
        logger.info("Seeded %d messages (root ids: %s, %s)", len(created), created[0].id, created[-1].id)
    finally:
        await engine.dispose()


def main() -> None:
    setup_logging(settings.LOG_LEVEL, settings.LOG_FILE)
    asyncio.run(_main())


if __name__ == "__main__":
    main()
