"""Build a document tree from stored TipTap JSON article content.

Articles are persisted as the editor's JSON document:
``{"type": "doc", "content": [{"type": "paragraph", "content": [...]}]}``.
Every node carries ``type`` and optionally ``content``, ``text``, ``attrs``
and ``marks``.

Mapping rules:
- ``text`` nodes -> text nodes (inline ``marks`` are ignored)
- ``hardBreak`` / ``image`` / ``horizontalRule`` -> leaves
- everything else -> block nodes, children built from ``content``
- camelCase type names -> the snake_case names ``build_document`` uses
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any

from quilltip.document.nodes import Node, doc, text

logger = logging.getLogger(__name__)

_LEAF_TYPES = frozenset(("hardBreak", "image", "horizontalRule"))

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def _node_name(node_type: str) -> str:
    return _CAMEL_BOUNDARY.sub("_", node_type).lower()


def _build(raw: dict[str, Any]) -> Node | None:
    node_type = raw.get("type")
    if not isinstance(node_type, str):
        msg = f"TipTap node without a type: {raw!r}"
        raise ValueError(msg)

    attrs = raw.get("attrs") or {}

    if node_type == "text":
        value = raw.get("text") or ""
        # ProseMirror rejects empty text nodes.
        return text(value) if value else None

    if node_type in _LEAF_TYPES:
        return Node(_node_name(node_type), leaf=True, attrs=dict(attrs))

    children: list[Node] = []
    for item in raw.get("content") or ():
        child = _build(item)
        if child is not None:
            children.append(child)
    return Node(_node_name(node_type), children=tuple(children), attrs=dict(attrs))


def build_document_from_json(content: dict[str, Any] | str | None) -> Node:
    """Turn stored TipTap JSON into a document tree.

    Args:
        content: The ``doc`` node as a dict, or its JSON string.

    Returns:
        Document root. ``None`` or an empty string yields an empty document.

    Raises:
        ValueError: If the JSON is invalid, the root is not a ``doc`` node,
            or a node has no ``type``.
    """
    if not content:
        return doc()

    if isinstance(content, str):
        try:
            content = json.loads(content)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid TipTap JSON: {e}") from e

    if not isinstance(content, dict) or content.get("type") != "doc":
        msg = "TipTap content must be a 'doc' node"
        raise ValueError(msg)

    root = _build(content)
    assert root is not None  # For type narrowing
    logger.debug("Built document with %d top-level blocks", len(root.children))
    return root
