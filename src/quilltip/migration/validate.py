"""Post-backfill validation: every highlight has an id and every tip links."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from quilltip.migration.audit import PREVIEW_CHARS, OrphanedTip, find_orphaned_tips

if TYPE_CHECKING:
    from collections.abc import Iterable

    from quilltip.highlights.models import HighlightDescriptor
    from quilltip.tips.models import HighlightTip

PASSED = "PASSED"
FAILED = "FAILED"


@dataclass(frozen=True)
class DuplicateId:
    """A highlight id carried by more than one record."""

    highlight_id: str
    count: int
    text: str
    user_ids: tuple[str, ...]

    @property
    def is_different_users(self) -> bool:
        return len(set(self.user_ids)) > 1

    @property
    def is_critical(self) -> bool:
        """Same user holding duplicate records is a real duplicate."""
        return not self.is_different_users


@dataclass
class ValidationReport:
    total_highlights: int = 0
    with_highlight_id: int = 0
    without_highlight_id: int = 0
    total_tips: int = 0
    valid_tip_links: int = 0
    orphaned_tips: list[OrphanedTip] = field(default_factory=list)
    duplicate_ids: list[DuplicateId] = field(default_factory=list)
    critical: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def status(self) -> str:
        return PASSED if not self.critical else FAILED

    @property
    def passed(self) -> bool:
        return self.status == PASSED


def validate_migration(
    highlights: Iterable[HighlightDescriptor], tips: Iterable[HighlightTip]
) -> ValidationReport:
    """Check backfill results.

    FAILED when any highlight still lacks an id or any tip is orphaned.
    Duplicate ids are warnings: critical when one user holds them all,
    intentional when different users made the same selection.
    """
    highlights = list(highlights)
    tips = list(tips)

    by_id: dict[str, list[HighlightDescriptor]] = defaultdict(list)
    for h in highlights:
        if h.highlight_id:
            by_id[h.highlight_id].append(h)

    with_id = sum(len(v) for v in by_id.values())
    orphaned = find_orphaned_tips(highlights, tips)
    report = ValidationReport(
        total_highlights=len(highlights),
        with_highlight_id=with_id,
        without_highlight_id=len(highlights) - with_id,
        total_tips=len(tips),
        valid_tip_links=len(tips) - len(orphaned),
        orphaned_tips=orphaned,
        duplicate_ids=[
            DuplicateId(
                highlight_id=hid,
                count=len(members),
                text=members[0].text[:PREVIEW_CHARS],
                user_ids=tuple(m.user_id for m in members),
            )
            for hid, members in by_id.items()
            if len(members) > 1
        ],
    )

    if report.without_highlight_id:
        report.critical.append(
            f"{report.without_highlight_id} highlights still missing a highlight id"
        )
    if orphaned:
        report.critical.append(
            f"{len(orphaned)} orphaned tips (tips with no matching highlight)"
        )

    critical_dupes = [d for d in report.duplicate_ids if d.is_critical]
    if critical_dupes:
        report.warnings.append(
            f"{len(critical_dupes)} critical duplicate ids (same user)"
        )
    intentional = len(report.duplicate_ids) - len(critical_dupes)
    if intentional:
        report.warnings.append(
            f"{intentional} intentional duplicate ids (different users, same text)"
        )
    return report
