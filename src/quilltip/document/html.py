"""Build a document tree from stored article HTML.

Walks the DOM via selectolax child/next iteration (which exposes text
nodes) and produces the typed ``Node`` tree used for position mapping.

Matching rules:
- script / style / noscript / template -> skipped entirely
- ``<br>`` -> ``hard_break`` leaf, ``<img>`` / ``<hr>`` -> leaves
- block tags -> block nodes named after the tag
- inline formatting tags -> flattened into their text
- whitespace-only text nodes inside block containers -> skipped
- whitespace runs (including ``\\u00a0``) -> collapsed to a single space
- inline content outside any textblock -> wrapped in a ``paragraph``
"""

# Pattern: Functional Core (pure functions over parsed HTML)

from __future__ import annotations

import logging
import re
from typing import Any

from selectolax.lexbor import LexborHTMLParser

from quilltip.document.nodes import Node, doc, leaf, text

logger = logging.getLogger(__name__)

_STRIP_TAGS = frozenset(("script", "style", "noscript", "template", "head"))

# Tags that become blocks containing inline content.
_TEXTBLOCK_TAGS = frozenset(
    ("p", "h1", "h2", "h3", "h4", "h5", "h6", "pre", "dt", "dd", "figcaption")
)

# Tags that become blocks containing other blocks.
_CONTAINER_TAGS = frozenset(
    (
        "table",
        "tbody",
        "thead",
        "tfoot",
        "tr",
        "td",
        "th",
        "ul",
        "ol",
        "li",
        "dl",
        "div",
        "section",
        "article",
        "aside",
        "header",
        "footer",
        "nav",
        "main",
        "figure",
        "blockquote",
    )
)

_COMMENT_TAGS = frozenset(("-comment", "_comment"))

_LEAF_TAGS = {"br": "hard_break", "img": "image", "hr": "horizontal_rule"}

# Whitespace runs, including \u00a0 (nbsp)
_WHITESPACE_RUN = re.compile(r"[\s\u00a0]+")

_NODE_NAMES = {
    "p": "paragraph",
    "h1": "heading",
    "h2": "heading",
    "h3": "heading",
    "h4": "heading",
    "h5": "heading",
    "h6": "heading",
    "pre": "code_block",
    "li": "list_item",
    "ul": "bullet_list",
    "ol": "ordered_list",
    "blockquote": "blockquote",
}


def _node_name(tag: str) -> str:
    return _NODE_NAMES.get(tag, tag)


def _block_attrs(tag: str, node: Any) -> dict[str, Any]:
    if tag.startswith("h") and len(tag) == 2 and tag[1].isdigit():
        return {"level": int(tag[1])}
    if tag == "ol":
        start = node.attributes.get("start")
        if start is not None and start.isdigit():
            return {"start": int(start)}
    return {}


def _leaf_attrs(tag: str, node: Any) -> dict[str, Any]:
    if tag == "img":
        return {"src": node.attributes.get("src"), "alt": node.attributes.get("alt")}
    return {}


class _Builder:
    """Accumulates inline content and closes it into paragraphs as needed."""

    def __init__(self) -> None:
        self.blocks: list[Node] = []
        self.inline: list[Node] = []

    def add_inline(self, node: Node) -> None:
        self.inline.append(node)

    def add_block(self, node: Node) -> None:
        self.flush()
        self.blocks.append(node)

    def flush(self) -> None:
        """Wrap pending inline content in an implicit paragraph."""
        if not self.inline:
            return
        # Whitespace-only runs between blocks are formatting, not content.
        if any(not n.is_text or (n.text or "").strip() for n in self.inline):
            self.blocks.append(Node("paragraph", children=tuple(self.inline)))
        self.inline = []


def _collapse(node: Any, parent_tag: str | None) -> str | None:
    """Return collapsed text for a text node, or ``None`` to skip it."""
    raw = node.text_content
    if not raw:
        return None
    if parent_tag in _CONTAINER_TAGS and _WHITESPACE_RUN.fullmatch(raw):
        return None
    return _WHITESPACE_RUN.sub(" ", raw)


def _collect_inline(node: Any, out: list[Node]) -> None:
    """Collect inline content of a textblock, flattening formatting tags."""
    child = node.child
    while child is not None:
        tag = child.tag
        if tag == "-text":
            collapsed = _collapse(child, None)
            if collapsed:
                out.append(text(collapsed))
        elif tag in _STRIP_TAGS:
            pass
        elif tag in _LEAF_TAGS:
            out.append(leaf(_LEAF_TAGS[tag], **_leaf_attrs(tag, child)))
        else:
            _collect_inline(child, out)
        child = child.next


def _walk_children(node: Any, builder: _Builder) -> None:
    child = node.child
    while child is not None:
        _walk(child, node.tag, builder)
        child = child.next


def _walk(node: Any, parent_tag: str | None, builder: _Builder) -> None:
    tag = node.tag

    if tag == "-text":
        collapsed = _collapse(node, parent_tag)
        if collapsed:
            builder.add_inline(text(collapsed))
        return

    if tag in _STRIP_TAGS or tag in _COMMENT_TAGS:
        return

    if tag in _LEAF_TAGS:
        builder.add_inline(leaf(_LEAF_TAGS[tag], **_leaf_attrs(tag, node)))
        return

    if tag in _TEXTBLOCK_TAGS:
        inline: list[Node] = []
        _collect_inline(node, inline)
        builder.add_block(
            Node(_node_name(tag), children=tuple(inline), attrs=_block_attrs(tag, node))
        )
        return

    if tag in _CONTAINER_TAGS:
        inner = _Builder()
        _walk_children(node, inner)
        inner.flush()
        builder.add_block(
            Node(
                _node_name(tag),
                children=tuple(inner.blocks),
                attrs=_block_attrs(tag, node),
            )
        )
        return

    # Inline formatting (strong, em, a, span, ...) or unknown tags.
    _walk_children(node, builder)


def build_document(html: str) -> Node:
    """Parse *html* into a document tree.

    Args:
        html: Article HTML (fragment or full document).

    Returns:
        Document root. Empty input yields an empty document.
    """
    if not html:
        return doc()

    tree = LexborHTMLParser(html)
    body = tree.body
    root = body if body else tree.root
    if root is None:
        return doc()

    builder = _Builder()
    _walk_children(root, builder)
    builder.flush()

    logger.debug("Built document with %d top-level blocks", len(builder.blocks))
    return doc(*builder.blocks)
