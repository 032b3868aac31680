"""Turn a live selection into a storable highlight.

Pure functions of the document snapshot and the selection: nothing here
touches storage or the host editor.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from quilltip.config import get_settings
from quilltip.document.nodes import text_between
from quilltip.highlights.identity import generate_highlight_id
from quilltip.highlights.models import HighlightDescriptor, HighlightFragment
from quilltip.highlights.position_map import to_text_offset

if TYPE_CHECKING:
    from quilltip.document.nodes import Node

logger = logging.getLogger(__name__)


def container_path(position: int) -> str:
    """Advisory locator for a structural position."""
    return f"text.{position}"


def extract_highlight(
    root: Node,
    start: int,
    end: int,
    *,
    min_length: int | None = None,
    max_length: int | None = None,
) -> HighlightFragment | None:
    """Derive a highlight fragment from the structural selection ``[start, end)``.

    Args:
        root: Document snapshot the selection was made in.
        start: Selection anchor, structural position.
        end: Selection head, structural position.
        min_length: Minimum trimmed text length; defaults to
            ``HIGHLIGHT__MIN_LENGTH`` (3).
        max_length: Maximum whitespace-normalised text length; defaults to
            ``HIGHLIGHT__MAX_LENGTH`` (5000).

    Returns:
        The fragment, or ``None`` when the selection is empty or its trimmed
        text is shorter than *min_length*, or its normalised text is longer
        than *max_length*.
    """
    if end <= start:
        return None
    settings = get_settings().highlight
    if min_length is None:
        min_length = settings.min_length
    if max_length is None:
        max_length = settings.max_length

    selected = text_between(root, start, end, " ")
    if len(selected.strip()) < min_length:
        logger.debug(
            "Selection [%d, %d) too short (%d chars) - ignored",
            start,
            end,
            len(selected.strip()),
        )
        return None

    normalised = len(" ".join(selected.split()))
    if normalised > max_length:
        logger.debug(
            "Selection [%d, %d) too long (%d chars) - ignored", start, end, normalised
        )
        return None

    return HighlightFragment(
        text=selected,
        start_offset=to_text_offset(root, start),
        end_offset=to_text_offset(root, end),
        start_container_path=container_path(start),
        end_container_path=container_path(end),
    )


def create_highlight_descriptor(
    fragment: HighlightFragment,
    *,
    article_slug: str,
    user_id: str,
    color: str | None = None,
    note: str | None = None,
    is_public: bool = True,
    user_name: str | None = None,
) -> HighlightDescriptor:
    """Build a new descriptor from *fragment*, always assigning its highlight id."""
    return HighlightDescriptor(
        highlight_id=generate_highlight_id(
            article_slug, fragment.text, fragment.start_offset, fragment.end_offset
        ),
        article_slug=article_slug,
        text=fragment.text,
        start_offset=fragment.start_offset,
        end_offset=fragment.end_offset,
        start_container_path=fragment.start_container_path,
        end_container_path=fragment.end_container_path,
        color=color or get_settings().highlight.default_color,
        note=note,
        is_public=is_public,
        user_id=user_id,
        user_name=user_name,
    )
