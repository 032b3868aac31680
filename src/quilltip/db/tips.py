"""Read and record highlight tips."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlmodel import select

from quilltip.db.engine import get_session
from quilltip.db.models import HighlightTip

if TYPE_CHECKING:
    from uuid import UUID

    from quilltip.tips.models import HighlightTip as HighlightTipRecord


async def create_tip(tip: HighlightTipRecord) -> UUID:
    """Record a confirmed tip and return its row id."""
    async with get_session() as session:
        row = HighlightTip.from_record(tip)
        session.add(row)
        await session.flush()
        await session.refresh(row)
        return row.id


async def get_tips_for_highlight(highlight_id: str) -> list[HighlightTipRecord]:
    """Get all tips on a highlight, oldest first."""
    async with get_session() as session:
        result = await session.exec(
            select(HighlightTip)
            .where(HighlightTip.highlight_id == highlight_id)
            .order_by("created_at")
        )
        return [row.to_record() for row in result.all()]


async def get_tips_for_article(article_slug: str) -> list[HighlightTipRecord]:
    """Get all highlight tips on an article, oldest first."""
    async with get_session() as session:
        result = await session.exec(
            select(HighlightTip)
            .where(HighlightTip.article_slug == article_slug)
            .order_by("created_at")
        )
        return [row.to_record() for row in result.all()]


async def list_tips() -> list[HighlightTipRecord]:
    """Get every highlight tip, for migration passes."""
    async with get_session() as session:
        result = await session.exec(select(HighlightTip).order_by("created_at"))
        return [row.to_record() for row in result.all()]
