"""CRUD operations for stored highlights.

Functions take and return ``HighlightDescriptor`` so callers never hold
live table rows.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlmodel import select

from quilltip.db.engine import get_session
from quilltip.db.models import Highlight
from quilltip.highlights.identity import is_valid_highlight_id

if TYPE_CHECKING:
    from collections.abc import Sequence
    from uuid import UUID

    from quilltip.highlights.models import HighlightDescriptor

logger = logging.getLogger(__name__)


async def save_highlight(descriptor: HighlightDescriptor) -> UUID:
    """Persist a new highlight.

    Args:
        descriptor: Highlight to store; must carry a well-formed highlight id.

    Returns:
        The generated row id.

    Raises:
        ValueError: If the highlight id is missing or malformed, or the
            descriptor has no article slug.
    """
    if not is_valid_highlight_id(descriptor.highlight_id):
        msg = f"Refusing to save highlight without a valid id: {descriptor.key}"
        raise ValueError(msg)

    async with get_session() as session:
        highlight = Highlight.from_descriptor(descriptor)
        session.add(highlight)
        await session.flush()
        await session.refresh(highlight)
        logger.debug(
            "Saved highlight %s on %s", highlight.highlight_id, highlight.article_slug
        )
        return highlight.id


async def load_highlights(article_slug: str) -> list[HighlightDescriptor]:
    """Get all highlights for an article, ordered by start offset."""
    async with get_session() as session:
        result = await session.exec(
            select(Highlight)
            .where(Highlight.article_slug == article_slug)
            .order_by("start_offset", "created_at")
        )
        return [row.to_descriptor() for row in result.all()]


async def list_highlights() -> list[HighlightDescriptor]:
    """Get every stored highlight, for migration passes."""
    async with get_session() as session:
        result = await session.exec(select(Highlight).order_by("created_at"))
        return [row.to_descriptor() for row in result.all()]


async def delete_highlight(row_id: UUID) -> bool:
    """Delete a highlight. Tips on it are kept.

    Returns:
        True if deleted, False if not found.
    """
    async with get_session() as session:
        highlight = await session.get(Highlight, row_id)
        if not highlight:
            return False
        await session.delete(highlight)
        return True


async def set_highlight_id(row_id: UUID, highlight_id: str) -> bool:
    """Write a backfilled highlight id onto a legacy row.

    Only writes when the row has no id yet, so repeated backfills never
    overwrite.

    Returns:
        True if the id was written, False if the row is missing or
        already had an id.

    Raises:
        ValueError: If *highlight_id* is malformed.
    """
    if not is_valid_highlight_id(highlight_id):
        msg = f"Invalid highlight id: {highlight_id!r}"
        raise ValueError(msg)

    async with get_session() as session:
        highlight = await session.get(Highlight, row_id)
        if not highlight or highlight.highlight_id is not None:
            return False
        highlight.highlight_id = highlight_id
        highlight.updated_at = datetime.now(UTC)
        session.add(highlight)
        return True


async def set_highlight_ids(assignments: Sequence[tuple[UUID, str]]) -> int:
    """Write a batch of backfilled ids in one transaction.

    Rows that are missing or already carry an id are left alone.

    Returns:
        Number of rows written.

    Raises:
        ValueError: If any highlight id is malformed; nothing is written.
    """
    for _, highlight_id in assignments:
        if not is_valid_highlight_id(highlight_id):
            msg = f"Invalid highlight id: {highlight_id!r}"
            raise ValueError(msg)

    written = 0
    async with get_session() as session:
        for row_id, highlight_id in assignments:
            highlight = await session.get(Highlight, row_id)
            if not highlight or highlight.highlight_id is not None:
                continue
            highlight.highlight_id = highlight_id
            highlight.updated_at = datetime.now(UTC)
            session.add(highlight)
            written += 1
        await session.flush()
    logger.info("Wrote %d of %d highlight ids", written, len(assignments))
    return written
