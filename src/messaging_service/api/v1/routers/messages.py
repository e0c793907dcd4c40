from __future__ import annotations

from fastapi import APIRouter, Response, status

from messaging_service.api.deps import UoWDep
from messaging_service.api.v1.schemas.message import CreateMessageRequest, MessageResponse
from messaging_service.api.v1.serializer import tree_response, trees_response
from messaging_service.domain.value_objects.ids import MessageId
from messaging_service.services import message_service

# Handlers return encoded Responses; response_model only documents the shape.
router = APIRouter(prefix="/api/messages", tags=["messages"])


@router.post(
    "",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
    responses={404: {"description": "Parent message not found"}},
)
async def create_message(body: CreateMessageRequest, uow: UoWDep) -> Response:
    msg = await message_service.create_message(
        body.to,
        body.from_,
        body.subject,
        body.body,
        MessageId(body.parent_message_id) if body.parent_message_id is not None else None,
        uow,
    )
    tree = await message_service.build_message_tree(msg, uow)
    response = tree_response(tree, status_code=status.HTTP_201_CREATED)
    response.headers["Location"] = f"{router.prefix}/{tree.id}"
    return response


@router.delete(
    "/{message_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"description": "Message not found"}},
)
async def delete_message(message_id: int, uow: UoWDep) -> Response:
    await message_service.delete_message(MessageId(message_id), uow)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.put("/{message_id}/read", response_model=MessageResponse)
async def mark_as_read(message_id: int, uow: UoWDep) -> Response:
    msg = await message_service.mark_as_read(MessageId(message_id), uow)
    return tree_response(await message_service.build_message_tree(msg, uow))


@router.put("/{message_id}/unread", response_model=MessageResponse)
async def mark_as_unread(message_id: int, uow: UoWDep) -> Response:
    msg = await message_service.mark_as_unread(MessageId(message_id), uow)
    return tree_response(await message_service.build_message_tree(msg, uow))


@router.get("", response_model=list[MessageResponse])
async def list_root_messages(uow: UoWDep) -> Response:
    messages = await message_service.list_root_messages(uow)
    return trees_response(await message_service.build_message_trees(messages, uow))


@router.get(
    "/user/{user_id}",
    response_model=list[MessageResponse],
    responses={404: {"description": "No root messages addressed to the user"}},
)
async def list_user_messages(user_id: str, uow: UoWDep) -> Response:
    messages = await message_service.list_user_messages(user_id, uow)
    return trees_response(await message_service.build_message_trees(messages, uow))


@router.get("/{message_id}", response_model=MessageResponse)
async def get_message(message_id: int, uow: UoWDep) -> Response:
    msg = await message_service.get_message(MessageId(message_id), uow)
    return tree_response(await message_service.build_message_tree(msg, uow))


@router.get("/{message_id}/children", response_model=list[MessageResponse])
async def list_child_messages(message_id: int, uow: UoWDep) -> Response:
    messages = await message_service.list_child_messages(MessageId(message_id), uow)
    return trees_response(await message_service.build_message_trees(messages, uow))
