from __future__ import annotations

import pytest

from messaging_service.application.exceptions import (
    ConflictError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from messaging_service.domain.value_objects.ids import MessageId
from messaging_service.services import message_service
from tests.conftest import FakeUoW, make_message


async def _create(uow: FakeUoW, parent_id=None, to="bob", sender="alice", subject="Hi"):
    return await message_service.create_message(to, sender, subject, "body", parent_id, uow)


@pytest.mark.asyncio
async def test_create_message_assigns_id_and_defaults(uow):
    msg = await message_service.create_message("bob", "alice", None, None, None, uow)

    assert msg.id is not None
    assert msg.subject == ""
    assert msg.body == ""
    assert msg.is_read is False
    assert msg.parent_id is None
    assert uow._committed is True


@pytest.mark.asyncio
async def test_created_message_round_trips(uow):
    created = await message_service.create_message("bob", "alice", "Hi", "there", None, uow)

    fetched = await message_service.get_message(created.id, uow)

    assert fetched == created


@pytest.mark.asyncio
async def test_create_reply_links_parent(uow):
    parent = await _create(uow)
    reply = await _create(uow, parent_id=parent.id, subject="Re: Hi")

    assert reply.parent_id == parent.id


@pytest.mark.asyncio
async def test_create_with_missing_parent_raises(uow):
    with pytest.raises(NotFoundError, match="Parent message with ID 999 not found"):
        await _create(uow, parent_id=MessageId(999))

    assert await message_service.list_root_messages(uow) == []
    assert uow.commits == 0


@pytest.mark.parametrize(("to", "sender"), [("", "alice"), ("bob", ""), ("   ", "alice")])
@pytest.mark.asyncio
async def test_create_requires_to_and_from(uow, to, sender):
    with pytest.raises(ValidationError):
        await message_service.create_message(to, sender, None, None, None, uow)


@pytest.mark.asyncio
async def test_create_rejects_parent_with_cyclic_ancestry(uow):
    # Corrupt data written behind the service's back: 1 -> 2 -> 1.
    uow.messages_w.put(make_message(message_id=1, parent_id=2))
    uow.messages_w.put(make_message(message_id=2, parent_id=1))

    with pytest.raises(ConflictError):
        await _create(uow, parent_id=MessageId(1))


@pytest.mark.asyncio
async def test_create_accepts_parent_with_deleted_ancestor(uow):
    uow.messages_w.put(make_message(message_id=5, parent_id=4))

    reply = await _create(uow, parent_id=MessageId(5))

    assert reply.parent_id == 5


@pytest.mark.asyncio
async def test_get_missing_message_raises(uow):
    with pytest.raises(NotFoundError):
        await message_service.get_message(MessageId(1), uow)


@pytest.mark.asyncio
async def test_delete_cascades_whole_subtree(uow):
    root = await _create(uow)
    a = await _create(uow, parent_id=root.id)
    b = await _create(uow, parent_id=root.id)
    a1 = await _create(uow, parent_id=a.id)
    a1x = await _create(uow, parent_id=a1.id)
    unrelated = await _create(uow)

    deleted = await message_service.delete_message(root.id, uow)

    assert deleted == 5
    for m in (root, a, b, a1, a1x):
        with pytest.raises(NotFoundError):
            await message_service.get_message(m.id, uow)
    assert await message_service.get_message(unrelated.id, uow) == unrelated


@pytest.mark.asyncio
async def test_delete_removes_children_before_parent(uow):
    root = await _create(uow)
    child = await _create(uow, parent_id=root.id)
    grandchild = await _create(uow, parent_id=child.id)

    await message_service.delete_message(root.id, uow)

    order = uow.messages_w.deleted
    assert order.index(grandchild.id) < order.index(child.id) < order.index(root.id)


@pytest.mark.asyncio
async def test_delete_leaf_keeps_parent(uow):
    root = await _create(uow)
    child = await _create(uow, parent_id=root.id)

    assert await message_service.delete_message(child.id, uow) == 1
    assert await message_service.list_child_messages(root.id, uow) == []


@pytest.mark.asyncio
async def test_delete_missing_message_raises(uow):
    with pytest.raises(NotFoundError):
        await message_service.delete_message(MessageId(42), uow)
    assert uow.commits == 0


@pytest.mark.asyncio
async def test_read_flag_is_idempotent(uow):
    msg = await _create(uow)

    first = await message_service.mark_as_read(msg.id, uow)
    second = await message_service.mark_as_read(msg.id, uow)
    assert first.is_read is True
    assert second.is_read is True

    unread = await message_service.mark_as_unread(msg.id, uow)
    assert unread.is_read is False
    assert (await message_service.get_message(msg.id, uow)).is_read is False


@pytest.mark.asyncio
async def test_mark_missing_message_raises(uow):
    with pytest.raises(NotFoundError):
        await message_service.mark_as_read(MessageId(7), uow)
    with pytest.raises(NotFoundError):
        await message_service.mark_as_unread(MessageId(7), uow)


@pytest.mark.asyncio
async def test_list_root_messages_excludes_replies(uow):
    root1 = await _create(uow)
    await _create(uow, parent_id=root1.id)
    root2 = await _create(uow, to="carol")

    roots = await message_service.list_root_messages(uow)

    assert [m.id for m in roots] == [root1.id, root2.id]
    assert all(m.parent_id is None for m in roots)


@pytest.mark.asyncio
async def test_list_root_messages_empty(uow):
    assert await message_service.list_root_messages(uow) == []


@pytest.mark.asyncio
async def test_list_user_messages_returns_only_roots_addressed_to_user(uow):
    mine = await _create(uow, to="bob")
    await _create(uow, parent_id=mine.id, to="bob")
    await _create(uow, to="carol", sender="bob")

    result = await message_service.list_user_messages("bob", uow)

    assert [m.id for m in result] == [mine.id]


@pytest.mark.asyncio
async def test_list_user_messages_empty_is_not_found(uow):
    await _create(uow, to="bob")

    with pytest.raises(NotFoundError):
        await message_service.list_user_messages("nonexistent-user", uow)


@pytest.mark.asyncio
async def test_list_children_of_leaf_is_empty_list(uow):
    leaf = await _create(uow)

    assert await message_service.list_child_messages(leaf.id, uow) == []


@pytest.mark.asyncio
async def test_list_children_of_missing_message_raises(uow):
    with pytest.raises(NotFoundError):
        await message_service.list_child_messages(MessageId(3), uow)


@pytest.mark.asyncio
async def test_alice_bob_scenario(uow):
    a = await message_service.create_message("bob", "alice", "Hi", None, None, uow)
    b = await message_service.create_message("bob", "alice", "Re: Hi", None, a.id, uow)

    children = await message_service.list_child_messages(a.id, uow)
    assert children == [b]

    await message_service.delete_message(a.id, uow)
    with pytest.raises(NotFoundError):
        await message_service.get_message(b.id, uow)


@pytest.mark.asyncio
async def test_build_message_tree_is_complete(uow):
    root = await _create(uow)
    c1 = await _create(uow, parent_id=root.id, subject="c1")
    c2 = await _create(uow, parent_id=root.id, subject="c2")
    c3 = await _create(uow, parent_id=c1.id, subject="c3")

    tree = await message_service.build_message_tree(root, uow)

    assert [n.id for n in tree.children] == [c1.id, c2.id]
    c1_node, c2_node = tree.children
    assert [n.id for n in c1_node.children] == [c3.id]
    assert c1_node.parent_id == root.id
    assert c2_node.children == []
    assert c1_node.children[0].subject == "c3"


@pytest.mark.asyncio
async def test_build_message_tree_reads_current_edges(uow):
    root = await _create(uow)
    before = await message_service.build_message_tree(root, uow)
    await _create(uow, parent_id=root.id)

    after = await message_service.build_message_tree(root, uow)

    assert before.children == []
    assert len(after.children) == 1


@pytest.mark.asyncio
async def test_build_message_tree_handles_deep_chains(uow):
    root = uow.messages_w.put(make_message(message_id=1))
    for i in range(2, 2002):
        uow.messages_w.put(make_message(message_id=i, parent_id=i - 1))

    tree = await message_service.build_message_tree(root, uow)

    depth = 0
    node = tree
    while node.children:
        node = node.children[0]
        depth += 1
    assert depth == 2000


@pytest.mark.asyncio
async def test_build_message_tree_rejects_cycles(uow):
    uow.messages_w.put(make_message(message_id=1, parent_id=2))
    uow.messages_w.put(make_message(message_id=2, parent_id=1))

    with pytest.raises(ConflictError):
        await message_service.build_message_tree(await uow.messages.get_by_id(MessageId(1)), uow)


@pytest.mark.parametrize(
    ("to", "sender", "subject"),
    [("b" * 256, "alice", None), ("bob", "a" * 256, None), ("bob", "alice", "s" * 256)],
)
@pytest.mark.asyncio
async def test_create_rejects_values_longer_than_columns(uow, to, sender, subject):
    with pytest.raises(ValidationError):
        await message_service.create_message(to, sender, subject, None, None, uow)
    assert uow.commits == 0


@pytest.mark.asyncio
async def test_create_accepts_long_body(uow):
    msg = await message_service.create_message("bob", "alice", None, "b" * 10_000, None, uow)
    assert len(msg.body) == 10_000


@pytest.mark.asyncio
async def test_unsaved_message_cannot_be_projected(uow):
    with pytest.raises(StorageError):
        await message_service.build_message_tree(make_message(), uow)
