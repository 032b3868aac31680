"""Deterministic highlight identifiers.

The highlight id is the join key between a highlight and its tips. It is
carried in the payment memo field, which holds at most 28 bytes, so the
SHA-256 hex digest is truncated to 28 characters.

Identical inputs always produce the identical id: the same selection made
twice in the same article collapses to one id.
"""

from __future__ import annotations

import hashlib
from typing import TYPE_CHECKING

from quilltip.highlights.models import HIGHLIGHT_ID_LENGTH, HIGHLIGHT_ID_PATTERN

if TYPE_CHECKING:
    from quilltip.highlights.models import HighlightDescriptor

# Only the first 50 UTF-16 code units of the text feed the hash.
HASHED_TEXT_CHARS = 50

MEMO_MAX_BYTES = 28


def _hashed_prefix(text: str) -> str:
    """First 50 UTF-16 code units of *text*, as a browser string slice sees them.

    An emoji counts as two units. A surrogate pair cut in half by the slice
    becomes U+FFFD, which is what a browser UTF-8 encoder emits for it.
    """
    units = text.encode("utf-16-le", "surrogatepass")[: HASHED_TEXT_CHARS * 2]
    return units.decode("utf-16-le", "replace")


def _canonical(doc_id: str, text: str, start_offset: int, end_offset: int) -> str:
    return f"{doc_id}:{start_offset}:{end_offset}:{_hashed_prefix(text)}"


def generate_highlight_id(
    doc_id: str, text: str, start_offset: int, end_offset: int
) -> str:
    """Derive the stable identifier for a highlight.

    Args:
        doc_id: Document identity (article slug).
        text: Highlighted text; only the first 50 UTF-16 code units are
            significant.
        start_offset: Text offset where the highlight starts.
        end_offset: Text offset where the highlight ends.

    Returns:
        First 28 lowercase hex characters of the SHA-256 digest of
        ``"<doc_id>:<start>:<end>:<prefix>"``, UTF-8 encoded.
    """
    data = _canonical(doc_id, text, start_offset, end_offset).encode("utf-8")
    return hashlib.sha256(data).hexdigest()[:HIGHLIGHT_ID_LENGTH]


def is_valid_highlight_id(value: object) -> bool:
    """Return True iff *value* is exactly 28 lowercase hex characters."""
    return isinstance(value, str) and HIGHLIGHT_ID_PATTERN.match(value) is not None


def ensure_highlight_id(descriptor: HighlightDescriptor) -> HighlightDescriptor:
    """Return *descriptor* with a highlight id, deriving one if missing.

    An existing id is never replaced.

    Raises:
        ValueError: If the id is missing and the descriptor has no
            ``article_slug`` to derive it from.
    """
    if descriptor.highlight_id is not None:
        return descriptor
    if not descriptor.article_slug:
        msg = f"Cannot derive highlight id for {descriptor.key}: no article_slug"
        raise ValueError(msg)
    highlight_id = generate_highlight_id(
        descriptor.article_slug,
        descriptor.text,
        descriptor.start_offset,
        descriptor.end_offset,
    )
    return descriptor.model_copy(update={"highlight_id": highlight_id})


def build_tip_memo(highlight_id: str) -> str:
    """Return the payment memo for a tip on *highlight_id*.

    Raises:
        ValueError: If the id is malformed or does not fit the memo field.
    """
    if not is_valid_highlight_id(highlight_id):
        msg = f"Invalid highlight id for memo: {highlight_id!r}"
        raise ValueError(msg)
    if len(highlight_id.encode("utf-8")) > MEMO_MAX_BYTES:
        msg = f"Highlight id exceeds {MEMO_MAX_BYTES}-byte memo limit"
        raise ValueError(msg)
    return highlight_id
