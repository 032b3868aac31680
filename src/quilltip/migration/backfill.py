"""Plan the backfill of highlight ids onto legacy records.

Planning is pure: it derives the id every legacy record would receive
and decides which ones are safe to write. The CLI applies the plan.
Records that already carry an id are never touched, so re-running the
backfill is a no-op.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

from quilltip.highlights.identity import ensure_highlight_id

if TYPE_CHECKING:
    from collections.abc import Iterable

    from quilltip.highlights.models import HighlightDescriptor

logger = logging.getLogger(__name__)


class BackfillAction(StrEnum):
    WRITE = "write"
    NEEDS_REVIEW = "needs_review"
    ERROR = "error"


@dataclass(frozen=True)
class BackfillEntry:
    """What the backfill will do with one legacy record.

    Attributes:
        record_id: Storage id of the record.
        highlight_id: Derived id, or None when derivation failed.
        action: Whether the id is written, held back, or failed.
        collision: Another record carries or would carry the same id.
        colliding_with: Storage id of the first record sharing the id.
        error: Failure message when ``action`` is ERROR.
    """

    record_id: str | None
    text: str
    article_slug: str | None
    highlight_id: str | None
    action: BackfillAction
    collision: bool = False
    colliding_with: str | None = None
    error: str | None = None


@dataclass
class BackfillPlan:
    total_highlights: int = 0
    already_set: int = 0
    entries: list[BackfillEntry] = field(default_factory=list)

    def _with_action(self, action: BackfillAction) -> list[BackfillEntry]:
        return [e for e in self.entries if e.action is action]

    @property
    def to_write(self) -> list[BackfillEntry]:
        return self._with_action(BackfillAction.WRITE)

    @property
    def needs_review(self) -> list[BackfillEntry]:
        return self._with_action(BackfillAction.NEEDS_REVIEW)

    @property
    def errors(self) -> list[BackfillEntry]:
        return self._with_action(BackfillAction.ERROR)

    @property
    def collisions(self) -> list[BackfillEntry]:
        return [e for e in self.entries if e.collision]


def plan_backfill(highlights: Iterable[HighlightDescriptor]) -> BackfillPlan:
    """Derive ids for records that lack one and classify each write.

    A derived id that another record already carries, or that an earlier
    legacy record in this run would receive, is a collision. When both
    records belong to the same user it is a real duplicate and the entry
    is held back for review. A collision across users means two people
    made the identical selection; that id is written and each keeps their
    own record.
    """
    highlights = list(highlights)
    plan = BackfillPlan(total_highlights=len(highlights))

    # highlight_id -> records known to carry it
    owners: dict[str, list[HighlightDescriptor]] = {}
    for h in highlights:
        if h.highlight_id:
            owners.setdefault(h.highlight_id, []).append(h)
    plan.already_set = sum(len(v) for v in owners.values())

    for h in highlights:
        if h.highlight_id:
            continue

        try:
            highlight_id = ensure_highlight_id(h).highlight_id
        except ValueError as exc:
            logger.warning("Cannot derive highlight id for %s: %s", h.key, exc)
            plan.entries.append(
                BackfillEntry(
                    record_id=h.id,
                    text=h.text,
                    article_slug=h.article_slug,
                    highlight_id=None,
                    action=BackfillAction.ERROR,
                    error=str(exc),
                )
            )
            continue

        assert highlight_id is not None  # For type narrowing
        existing = [o for o in owners.get(highlight_id, []) if o.id != h.id]
        same_user = any(o.user_id == h.user_id for o in existing)
        action = BackfillAction.NEEDS_REVIEW if same_user else BackfillAction.WRITE

        if existing:
            logger.info(
                "Highlight id %s collides for %s (%s)",
                highlight_id,
                h.key,
                "same user" if same_user else "different user",
            )

        plan.entries.append(
            BackfillEntry(
                record_id=h.id,
                text=h.text,
                article_slug=h.article_slug,
                highlight_id=highlight_id,
                action=action,
                collision=bool(existing),
                colliding_with=existing[0].id if existing else None,
            )
        )
        owners.setdefault(highlight_id, []).append(h)

    return plan
