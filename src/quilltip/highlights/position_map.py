"""Conversion between structural positions and text offsets.

Structural positions count every node token (block open/close, leaves,
characters). Text offsets count only characters of text nodes, so they
stay stable across re-renders that do not change visible text.

Both functions walk a single document snapshot in document order.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from quilltip.document.nodes import text_nodes

if TYPE_CHECKING:
    from quilltip.document.nodes import Node

logger = logging.getLogger(__name__)


def text_length(root: Node) -> int:
    """Total number of characters in text-offset space."""
    return sum(node.size for node, _pos in text_nodes(root))


def to_text_offset(root: Node, position: int) -> int:
    """Convert a structural *position* to a text offset.

    Accumulates the length of every text node that ends at or before
    *position*; when *position* falls inside a text node, adds the offset
    within that node and stops. Structural tokens contribute nothing.
    """
    offset = 0
    for node, pos in text_nodes(root):
        end = pos + node.size
        if end <= position:
            offset += node.size
            continue
        if pos <= position:
            return offset + (position - pos)
        break
    return offset


def to_structural_position(
    root: Node, text_offset: int, *, clamp: bool = False
) -> int:
    """Convert a *text_offset* to a structural position.

    An offset that lands exactly on the boundary between two text nodes is
    attributed to the start of the following node. An offset equal to the
    total text length maps to the end of the last text node.

    Offsets beyond the total text length return *text_offset* unchanged
    (lossy fallback), or the end of the last text node when *clamp* is
    true. An empty document maps everything to 0.
    """
    running = 0
    last_end: int | None = None
    for node, pos in text_nodes(root):
        length = node.size
        if running + length > text_offset:
            return pos + max(text_offset - running, 0)
        running += length
        last_end = pos + length

    if last_end is None:
        return 0
    if text_offset == running or clamp:
        return last_end

    logger.debug(
        "Text offset %d exceeds document text length %d; returning raw offset",
        text_offset,
        running,
    )
    return text_offset
