from __future__ import annotations

import dataclasses
import logging
from collections import deque

from messaging_service.application.dto.message import (
    MessageFilterDTO,
    MessageTreeDTO,
    stored_id,
)
from messaging_service.application.exceptions import (
    ConflictError,
    NotFoundError,
    ValidationError,
)
from messaging_service.application.uow import UnitOfWork
from messaging_service.domain.entities.message import MAX_FIELD_LENGTH, Message
from messaging_service.domain.value_objects.ids import MessageId

logger = logging.getLogger(__name__)


async def create_message(
    to: str,
    sender: str,
    subject: str | None,
    body: str | None,
    parent_id: MessageId | None,
    uow: UnitOfWork,
) -> Message:
    """Store a new unread message, optionally as a reply to ``parent_id``."""
    if not to or not to.strip():
        raise ValidationError("'to' must be a non-empty string")
    if not sender or not sender.strip():
        raise ValidationError("'from' must be a non-empty string")
    for name, value in (("to", to), ("from", sender), ("subject", subject)):
        if value is not None and len(value) > MAX_FIELD_LENGTH:
            raise ValidationError(f"'{name}' must be at most {MAX_FIELD_LENGTH} characters")

    if parent_id is not None:
        parent = await uow.messages.get_by_id(parent_id)
        if parent is None:
            raise NotFoundError(f"Parent message with ID {parent_id} not found")
        await _assert_acyclic_ancestry(parent, uow)

    msg = Message(
        id=None,
        to=to,
        sender=sender,
        subject=subject or "",
        body=body or "",
        is_read=False,
        parent_id=parent_id,
    )
    msg = await uow.messages_w.add(msg)
    await uow.commit()

    logger.info("Created message %s from %s to %s (parent=%s)", msg.id, sender, to, parent_id)
    return msg


async def delete_message(message_id: MessageId, uow: UnitOfWork) -> int:
    """Delete a message and its whole subtree. Returns the number of deleted messages."""
    message = await _get_or_raise(message_id, uow)

    subtree = await _collect_subtree_ids(message, uow)
    # Reverse BFS order: every message goes after all of its descendants.
    for mid in reversed(subtree):
        await uow.messages_w.delete(mid)
    await uow.commit()

    logger.info("Deleted message %s with %d descendant(s)", message_id, len(subtree) - 1)
    return len(subtree)


async def mark_as_read(message_id: MessageId, uow: UnitOfWork) -> Message:
    return await _set_read_flag(message_id, True, uow)


async def mark_as_unread(message_id: MessageId, uow: UnitOfWork) -> Message:
    return await _set_read_flag(message_id, False, uow)


async def get_message(message_id: MessageId, uow: UnitOfWork) -> Message:
    return await _get_or_raise(message_id, uow)


async def list_root_messages(uow: UnitOfWork) -> list[Message]:
    return await uow.messages.query(MessageFilterDTO(roots_only=True))


async def list_user_messages(user_id: str, uow: UnitOfWork) -> list[Message]:
    """Root messages addressed to ``user_id``.

    Unlike the other listings an empty result raises NotFoundError; clients
    of the HTTP API depend on the 404.
    """
    logger.info("Searching for messages with to=%s", user_id)
    messages = await uow.messages.query(MessageFilterDTO(to=user_id, roots_only=True))
    if not messages:
        logger.warning("No messages found for user %s", user_id)
        raise NotFoundError(f"No messages found for user {user_id}")

    logger.info("Found %d message(s) for user %s", len(messages), user_id)
    return messages


async def list_child_messages(message_id: MessageId, uow: UnitOfWork) -> list[Message]:
    await _get_or_raise(message_id, uow)
    return await uow.messages.query(MessageFilterDTO(parent_id=message_id))


async def build_message_tree(message: Message, uow: UnitOfWork) -> MessageTreeDTO:
    """Project ``message`` and all of its transitive children.

    Children are read from storage on every call and kept in insertion order.
    Walks an explicit stack so deep reply chains do not hit the recursion limit.
    """
    root = MessageTreeDTO.from_entity(message)
    seen: set[MessageId] = {root.id}
    stack: list[MessageTreeDTO] = [root]

    while stack:
        node = stack.pop()
        children = await uow.messages.query(MessageFilterDTO(parent_id=node.id))
        for child in children:
            child_node = MessageTreeDTO.from_entity(child)
            if child_node.id in seen:
                raise ConflictError(f"Message {child_node.id} appears twice in the tree of {root.id}")
            seen.add(child_node.id)
            node.children.append(child_node)
            stack.append(child_node)

    return root


async def build_message_trees(messages: list[Message], uow: UnitOfWork) -> list[MessageTreeDTO]:
    return [await build_message_tree(m, uow) for m in messages]


async def _get_or_raise(message_id: MessageId, uow: UnitOfWork) -> Message:
    message = await uow.messages.get_by_id(message_id)
    if message is None:
        raise NotFoundError(f"Message with ID {message_id} not found")
    return message


async def _set_read_flag(message_id: MessageId, is_read: bool, uow: UnitOfWork) -> Message:
    message = await _get_or_raise(message_id, uow)
    updated = await uow.messages_w.update(dataclasses.replace(message, is_read=is_read))
    if updated is None:
        raise NotFoundError(f"Message with ID {message_id} not found")
    await uow.commit()
    return updated


async def _collect_subtree_ids(message: Message, uow: UnitOfWork) -> list[MessageId]:
    """Breadth-first ids of ``message`` and its descendants, ``message`` first."""
    root_id = stored_id(message)
    order: list[MessageId] = [root_id]
    seen: set[MessageId] = {root_id}
    queue: deque[MessageId] = deque([root_id])

    while queue:
        current = queue.popleft()
        for child in await uow.messages.query(MessageFilterDTO(parent_id=current)):
            child_id = stored_id(child)
            if child_id in seen:
                raise ConflictError(f"Message {child_id} appears twice under {root_id}")
            seen.add(child_id)
            order.append(child_id)
            queue.append(child_id)

    return order


async def _assert_acyclic_ancestry(parent: Message, uow: UnitOfWork) -> None:
    """Walk up from ``parent`` to its root; a revisited id means the stored chain loops."""
    seen: set[MessageId] = {stored_id(parent)}
    current = parent

    while current.parent_id is not None:
        if current.parent_id in seen:
            raise ConflictError(f"Ancestor chain of message {parent.id} contains a cycle")
        seen.add(current.parent_id)
        ancestor = await uow.messages.get_by_id(current.parent_id)
        if ancestor is None:
            # Dangling reference to a deleted ancestor; the chain ends here.
            return
        current = ancestor
