"""Wire encoding of message trees.

Trees are written with an explicit work stack, so the JSON output has no
nesting limit of its own (pydantic and the json module both recurse per level).
"""
from __future__ import annotations

import json
from typing import Any

from fastapi import Response

from messaging_service.application.dto.message import MessageTreeDTO

MEDIA_TYPE = "application/json"


def _fields(node: MessageTreeDTO) -> dict[str, Any]:
    return {
        "id": node.id,
        "to": node.to,
        "from": node.sender,
        "subject": node.subject,
        "body": node.body,
        "isRead": node.is_read,
        "parentMessageId": node.parent_id,
    }


def _write(items: list[MessageTreeDTO], out: list[str]) -> None:
    # Stack holds either literal JSON fragments or nodes still to be opened.
    stack: list[str | MessageTreeDTO] = ["]"]
    for i in range(len(items) - 1, -1, -1):
        stack.append(items[i])
        if i:
            stack.append(",")
    out.append("[")

    while stack:
        item = stack.pop()
        if isinstance(item, str):
            out.append(item)
            continue
        # Drop the closing brace, children are appended before it.
        out.append(json.dumps(_fields(item))[:-1])
        out.append(', "children": [')
        stack.append("]}")
        children = item.children
        for i in range(len(children) - 1, -1, -1):
            stack.append(children[i])
            if i:
                stack.append(",")


def encode_trees(trees: list[MessageTreeDTO]) -> str:
    out: list[str] = []
    _write(trees, out)
    return "".join(out)


def encode_tree(tree: MessageTreeDTO) -> str:
    # Strip the list brackets around a single tree.
    return encode_trees([tree])[1:-1]


def tree_response(tree: MessageTreeDTO, status_code: int = 200) -> Response:
    return Response(encode_tree(tree), status_code=status_code, media_type=MEDIA_TYPE)


def trees_response(trees: list[MessageTreeDTO]) -> Response:
    return Response(encode_trees(trees), media_type=MEDIA_TYPE)
