"""Document tree abstraction: nodes, HTML and TipTap JSON providers, marks."""

from quilltip.document.html import build_document
from quilltip.document.marks import AppliedMark, MarkCapability, MarkedDocument
from quilltip.document.nodes import (
    Node,
    block,
    descendants,
    doc,
    leaf,
    paragraph,
    text,
    text_between,
    text_content,
    text_nodes,
)
from quilltip.document.tiptap import build_document_from_json

__all__ = [
    "AppliedMark",
    "MarkCapability",
    "MarkedDocument",
    "Node",
    "block",
    "build_document",
    "build_document_from_json",
    "descendants",
    "doc",
    "leaf",
    "paragraph",
    "text",
    "text_between",
    "text_content",
    "text_nodes",
]
