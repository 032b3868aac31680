"""Tip records and aggregate views.

Tips are created by the payment flow; this package only reads them and
groups them by ``highlight_id`` for display.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def _utcnow() -> datetime:
    """Return current UTC time as timezone-aware datetime."""
    return datetime.now(UTC)


class HighlightTip(BaseModel):
    """A confirmed tip on a highlighted span."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    id: str | None = None
    highlight_id: str
    article_slug: str
    tipper_id: str
    highlight_text: str = ""
    start_offset: int = Field(default=0, ge=0)
    end_offset: int = Field(default=0, ge=0)
    amount_cents: int = Field(ge=0)
    tx_id: str | None = None
    memo: str | None = None
    created_at: datetime = Field(default_factory=_utcnow)


@dataclass
class HighlightTipGroup:
    """All tips on one highlight."""

    highlight_id: str
    text: str
    start_offset: int
    end_offset: int
    tip_count: int = 0
    total_amount_cents: int = 0


@dataclass
class ArticleTipStats:
    """Tip totals for one article, with its most-tipped highlights."""

    total_tips: int = 0
    total_amount_cents: int = 0
    unique_tippers: int = 0
    top_highlights: list[HighlightTipGroup] = field(default_factory=list)

    @property
    def total_amount_usd(self) -> float:
        return self.total_amount_cents / 100


@dataclass(frozen=True)
class TipBreakdown:
    """Split of a tip between platform fee and author."""

    platform_fee_cents: int
    author_share_cents: int
