"""SQLModel tables for highlights and highlight tips.

Rows convert to and from the in-memory models in ``quilltip.highlights``
and ``quilltip.tips``; nothing outside this package sees table objects.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any
from uuid import UUID, uuid4

import sqlalchemy as sa
from sqlalchemy import Column, DateTime
from sqlmodel import Field, SQLModel

from quilltip.highlights.models import DEFAULT_HIGHLIGHT_COLOR, HighlightDescriptor
from quilltip.tips.models import HighlightTip as HighlightTipRecord


def _utcnow() -> datetime:
    """Return current UTC time as timezone-aware datetime."""
    return datetime.now(UTC)


def _timestamptz_column() -> Any:
    """Create a TIMESTAMP WITH TIME ZONE column for PostgreSQL."""
    return Column(DateTime(timezone=True), nullable=False)


class Highlight(SQLModel, table=True):
    """A stored user highlight on an article.

    Attributes:
        id: Primary key UUID, auto-generated.
        highlight_id: Derived 28-char hex id; NULL on legacy rows until backfilled.
        article_slug: Article the highlight belongs to.
        text: Highlighted text as captured at creation.
        start_offset: Text offset where the highlight starts.
        end_offset: Text offset where the highlight ends (exclusive).
        user_id: Owner of the highlight.
        created_at: When the highlight was made.
        updated_at: Last write, including id backfill.
    """

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    highlight_id: str | None = Field(default=None, index=True, max_length=28)
    article_slug: str = Field(index=True, max_length=255)
    text: str = Field(sa_column=Column(sa.Text(), nullable=False))
    start_offset: int = Field(ge=0)
    end_offset: int = Field(ge=0)
    start_container_path: str = Field(default="", max_length=64)
    end_container_path: str = Field(default="", max_length=64)
    color: str = Field(default=DEFAULT_HIGHLIGHT_COLOR, max_length=32)
    note: str | None = Field(
        default=None, sa_column=Column(sa.Text(), nullable=True)
    )
    is_public: bool = Field(default=True)
    user_id: str = Field(index=True, max_length=255)
    user_name: str | None = Field(default=None, max_length=100)
    created_at: datetime = Field(
        default_factory=_utcnow, sa_column=_timestamptz_column()
    )
    updated_at: datetime = Field(
        default_factory=_utcnow, sa_column=_timestamptz_column()
    )

    def to_descriptor(self) -> HighlightDescriptor:
        return HighlightDescriptor(
            id=str(self.id),
            highlight_id=self.highlight_id,
            article_slug=self.article_slug,
            text=self.text,
            start_offset=self.start_offset,
            end_offset=self.end_offset,
            start_container_path=self.start_container_path,
            end_container_path=self.end_container_path,
            color=self.color,
            note=self.note,
            is_public=self.is_public,
            user_id=self.user_id,
            user_name=self.user_name,
            created_at=self.created_at,
        )

    @classmethod
    def from_descriptor(cls, descriptor: HighlightDescriptor) -> Highlight:
        if not descriptor.article_slug:
            msg = f"Highlight {descriptor.key} has no article_slug"
            raise ValueError(msg)
        return cls(
            highlight_id=descriptor.highlight_id,
            article_slug=descriptor.article_slug,
            text=descriptor.text,
            start_offset=descriptor.start_offset,
            end_offset=descriptor.end_offset,
            start_container_path=descriptor.start_container_path,
            end_container_path=descriptor.end_container_path,
            color=descriptor.color,
            note=descriptor.note,
            is_public=descriptor.is_public,
            user_id=descriptor.user_id,
            user_name=descriptor.user_name,
            created_at=descriptor.created_at,
        )


class HighlightTip(SQLModel, table=True):
    """A confirmed tip, linked to its highlight by ``highlight_id``.

    No foreign key: tips survive highlight deletion, and a tip can match
    several highlight rows when different users made the same selection.
    """

    __tablename__ = "highlight_tip"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    highlight_id: str = Field(index=True, max_length=28)
    article_slug: str = Field(index=True, max_length=255)
    tipper_id: str = Field(index=True, max_length=255)
    highlight_text: str = Field(
        default="", sa_column=Column(sa.Text(), nullable=False)
    )
    start_offset: int = Field(default=0, ge=0)
    end_offset: int = Field(default=0, ge=0)
    amount_cents: int = Field(ge=0)
    tx_id: str | None = Field(default=None, max_length=128)
    memo: str | None = Field(default=None, max_length=28)
    created_at: datetime = Field(
        default_factory=_utcnow, sa_column=_timestamptz_column()
    )

    def to_record(self) -> HighlightTipRecord:
        return HighlightTipRecord(
            id=str(self.id),
            highlight_id=self.highlight_id,
            article_slug=self.article_slug,
            tipper_id=self.tipper_id,
            highlight_text=self.highlight_text,
            start_offset=self.start_offset,
            end_offset=self.end_offset,
            amount_cents=self.amount_cents,
            tx_id=self.tx_id,
            memo=self.memo,
            created_at=self.created_at,
        )

    @classmethod
    def from_record(cls, tip: HighlightTipRecord) -> HighlightTip:
        return cls(
            highlight_id=tip.highlight_id,
            article_slug=tip.article_slug,
            tipper_id=tip.tipper_id,
            highlight_text=tip.highlight_text,
            start_offset=tip.start_offset,
            end_offset=tip.end_offset,
            amount_cents=tip.amount_cents,
            tx_id=tip.tx_id,
            memo=tip.memo,
            created_at=tip.created_at,
        )
