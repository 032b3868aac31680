"""Read-only audit of stored highlights before an id backfill."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from quilltip.highlights.models import HighlightDescriptor
    from quilltip.tips.models import HighlightTip

# Characters of highlight text kept in report entries and duplicate keys.
PREVIEW_CHARS = 50


@dataclass(frozen=True)
class OrphanedTip:
    """A tip whose highlight id matches no stored highlight."""

    tip_id: str | None
    highlight_id: str
    text: str
    article_slug: str = ""


@dataclass(frozen=True)
class DuplicateMember:
    id: str | None
    user_id: str
    has_id: bool


@dataclass(frozen=True)
class DuplicateText:
    """Highlights sharing the same article and leading text."""

    key: str
    count: int
    members: tuple[DuplicateMember, ...]


@dataclass
class AuditReport:
    total_highlights: int = 0
    with_highlight_id: int = 0
    without_highlight_id: int = 0
    total_tips: int = 0
    orphaned_tips: list[OrphanedTip] = field(default_factory=list)
    duplicate_texts: list[DuplicateText] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)

    @property
    def percentage_complete(self) -> int:
        if not self.total_highlights:
            return 0
        return round(self.with_highlight_id / self.total_highlights * 100)

    @property
    def has_critical_issues(self) -> bool:
        return bool(self.orphaned_tips)


def find_orphaned_tips(
    highlights: Sequence[HighlightDescriptor], tips: Iterable[HighlightTip]
) -> list[OrphanedTip]:
    """Tips whose ``highlight_id`` no stored highlight carries."""
    known = {h.highlight_id for h in highlights if h.highlight_id}
    return [
        OrphanedTip(
            tip_id=tip.id,
            highlight_id=tip.highlight_id,
            text=tip.highlight_text[:PREVIEW_CHARS],
            article_slug=tip.article_slug,
        )
        for tip in tips
        if tip.highlight_id not in known
    ]


def _duplicate_texts(highlights: Sequence[HighlightDescriptor]) -> list[DuplicateText]:
    groups: dict[str, list[HighlightDescriptor]] = defaultdict(list)
    for h in highlights:
        groups[f"{h.article_slug or ''}:{h.text[:PREVIEW_CHARS]}"].append(h)

    return [
        DuplicateText(
            key=key,
            count=len(members),
            members=tuple(
                DuplicateMember(m.id, m.user_id, m.highlight_id is not None)
                for m in members
            ),
        )
        for key, members in groups.items()
        if len(members) > 1
    ]


def audit_highlights(
    highlights: Iterable[HighlightDescriptor], tips: Iterable[HighlightTip]
) -> AuditReport:
    """Count highlights with and without ids and flag likely problems.

    Orphaned tips are critical: the tip cannot be shown against any
    highlight. Duplicate texts are only a collision risk, usually harmless
    when the same user highlighted the same passage twice.
    """
    highlights = list(highlights)
    tips = list(tips)

    with_id = sum(1 for h in highlights if h.highlight_id)
    report = AuditReport(
        total_highlights=len(highlights),
        with_highlight_id=with_id,
        without_highlight_id=len(highlights) - with_id,
        total_tips=len(tips),
        orphaned_tips=find_orphaned_tips(highlights, tips),
        duplicate_texts=_duplicate_texts(highlights),
    )

    if report.without_highlight_id == 0:
        report.recommendations.append(
            "All highlights have a highlight id; no backfill needed"
        )
    else:
        report.recommendations.append(
            f"{report.without_highlight_id} highlights need a highlight id; "
            "run the backfill"
        )
    if report.orphaned_tips:
        report.recommendations.append(
            f"{len(report.orphaned_tips)} orphaned tips found; "
            "review them before backfilling"
        )
    if report.duplicate_texts:
        report.recommendations.append(
            f"{len(report.duplicate_texts)} duplicate text patterns found; "
            "check for id collisions (usually safe when the same user)"
        )
    return report
