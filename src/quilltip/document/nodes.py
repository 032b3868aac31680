"""Typed document tree with structural positions.

The tree mirrors the position model used by rich-text editors: every
node occupies a span of structural positions, but only text nodes carry
rendered characters.

Sizes:
- text node: ``len(text)``
- leaf node (hard break, image): 1
- block node: 2 (open + close token) plus the size of its children

The document root itself is not counted: its content starts at
position 0 and ends at ``content_size(root)``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import cached_property
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Iterator


@dataclass(frozen=True)
class Node:
    """A single node in a document tree.

    Attributes:
        type: Node type name (``"text"``, ``"paragraph"``, ``"hard_break"``...).
        text: Text content for text nodes, ``None`` otherwise.
        children: Child nodes in document order (block nodes only).
        leaf: True for non-text inline leaves such as hard breaks.
        attrs: Arbitrary node attributes (heading level, image src, ...).
    """

    type: str
    text: str | None = None
    children: tuple[Node, ...] = ()
    leaf: bool = False
    attrs: dict[str, Any] = field(default_factory=dict, compare=False)

    @property
    def is_text(self) -> bool:
        return self.text is not None

    @property
    def is_leaf(self) -> bool:
        return self.is_text or self.leaf

    @property
    def is_inline(self) -> bool:
        return self.is_leaf

    @property
    def is_block(self) -> bool:
        return not self.is_leaf

    @property
    def is_textblock(self) -> bool:
        """Block whose children are all inline (paragraph, heading, ...)."""
        return self.is_block and all(child.is_inline for child in self.children)

    @cached_property
    def content_size(self) -> int:
        return sum(child.size for child in self.children)

    @cached_property
    def size(self) -> int:
        if self.text is not None:
            return len(self.text)
        if self.leaf:
            return 1
        return self.content_size + 2


def text(value: str) -> Node:
    """Build a text node."""
    return Node("text", text=value)


def block(node_type: str, *children: Node, **attrs: Any) -> Node:
    """Build a block node from children."""
    return Node(node_type, children=tuple(children), attrs=attrs)


def leaf(node_type: str, **attrs: Any) -> Node:
    """Build a non-text leaf node (hard break, image)."""
    return Node(node_type, leaf=True, attrs=attrs)


def doc(*children: Node) -> Node:
    """Build a document root."""
    return Node("doc", children=tuple(children))


def paragraph(*parts: str | Node) -> Node:
    """Build a paragraph, turning plain strings into text nodes."""
    return Node(
        "paragraph",
        children=tuple(text(p) if isinstance(p, str) else p for p in parts),
    )


def descendants(root: Node) -> Iterator[tuple[Node, int]]:
    """Yield ``(node, pos)`` for every descendant of *root* in document order.

    ``pos`` is the structural position immediately before the node.
    Depth-first, parents before their children.
    """

    def _walk(parent: Node, start: int) -> Iterator[tuple[Node, int]]:
        pos = start
        for child in parent.children:
            yield child, pos
            if child.children:
                yield from _walk(child, pos + 1)
            pos += child.size

    yield from _walk(root, 0)


def text_nodes(root: Node) -> Iterator[tuple[Node, int]]:
    """Yield ``(node, pos)`` for text nodes only."""
    for node, pos in descendants(root):
        if node.is_text:
            yield node, pos


def text_content(root: Node) -> str:
    """Concatenate every text node (text-offset space)."""
    return "".join(node.text or "" for node, _pos in text_nodes(root))


def text_between(
    root: Node,
    start: int,
    end: int,
    block_separator: str = " ",
) -> str:
    """Return the text of the structural range ``[start, end)``.

    Text nodes overlapping the range contribute their overlapping slice.
    *block_separator* is inserted between successive textblocks so that a
    selection across paragraphs stays readable.
    """
    if end <= start:
        return ""

    parts: list[str] = []
    first = True
    for node, pos in descendants(root):
        if pos >= end:
            break
        if pos + node.size <= start:
            continue

        if node.is_text:
            assert node.text is not None
            chunk = node.text[max(start, pos) - pos : end - pos]
        else:
            chunk = ""

        if node.is_textblock and block_separator:
            if first:
                first = False
            else:
                parts.append(block_separator)
        parts.append(chunk)

    return "".join(parts)
