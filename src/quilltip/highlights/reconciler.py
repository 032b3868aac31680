"""Re-anchor stored highlights onto a document snapshot.

Runs on every document load or update. Each pass clears every highlight
mark, then maps each stored descriptor back to structural positions,
checks that the text found there still matches what was highlighted, and
re-applies the mark.

A descriptor that cannot be placed is skipped for this pass and logged;
it is never deleted, and a later pass may place it again. One bad
descriptor never prevents the others from rendering, and nothing raises
out of ``reconcile_highlights``.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Any

from quilltip.config import get_settings
from quilltip.document.nodes import text_between
from quilltip.highlights.position_map import to_structural_position

if TYPE_CHECKING:
    from collections.abc import Iterable

    from quilltip.document.marks import MarkCapability
    from quilltip.document.nodes import Node
    from quilltip.highlights.models import HighlightDescriptor

logger = logging.getLogger(__name__)

_WHITESPACE_RUN = re.compile(r"\s+")


class SkipReason(StrEnum):
    """Why a descriptor was not marked in a reconciliation pass."""

    OUT_OF_BOUNDS = "out_of_bounds"
    TEXT_MISMATCH = "text_mismatch"
    ERROR = "error"


@dataclass(frozen=True)
class SkippedHighlight:
    """A descriptor left unmarked, with the reason."""

    key: str
    reason: SkipReason
    detail: str = ""


@dataclass
class ReconcileReport:
    """Outcome of one reconciliation pass."""

    applied: list[str] = field(default_factory=list)
    skipped: list[SkippedHighlight] = field(default_factory=list)

    @property
    def orphaned(self) -> list[str]:
        """Keys of descriptors whose text no longer matches the document."""
        return [s.key for s in self.skipped if s.reason is SkipReason.TEXT_MISMATCH]


def normalise_text(value: str) -> str:
    """Trim and collapse whitespace runs to a single space."""
    return _WHITESPACE_RUN.sub(" ", value).strip()


def texts_match(expected: str, actual: str) -> bool:
    """Check that *actual* document text still matches stored *expected* text.

    Equal after normalisation, or either one contains the other. The
    containment check tolerates drift from upstream edits; it also accepts
    matches much longer or shorter than the original.
    """
    expected_norm = normalise_text(expected)
    actual_norm = normalise_text(actual)
    if not expected_norm or not actual_norm:
        return False
    return (
        expected_norm == actual_norm
        or expected_norm in actual_norm
        or actual_norm in expected_norm
    )


def highlight_mark_attrs(descriptor: HighlightDescriptor) -> dict[str, Any]:
    """Attributes carried by a highlight mark for tooltips and attribution."""
    return {
        "id": descriptor.id or descriptor.highlight_id,
        "highlight_id": descriptor.highlight_id,
        "color": descriptor.color or get_settings().highlight.default_color,
        "user_id": descriptor.user_id,
        "user_name": descriptor.user_name,
        "note": descriptor.note,
        "created_at": descriptor.created_at.isoformat(),
    }


def _place(
    root: Node,
    marks: MarkCapability,
    descriptor: HighlightDescriptor,
    mark_type: str,
    clamp: bool,
) -> SkippedHighlight | None:
    start = to_structural_position(root, descriptor.start_offset, clamp=clamp)
    end = to_structural_position(root, descriptor.end_offset, clamp=clamp)

    size = root.content_size
    if start < 0 or end <= start or end > size:
        detail = f"mapped to [{start}, {end}) in document of size {size}"
        logger.warning("Highlight %s out of bounds: %s", descriptor.key, detail)
        return SkippedHighlight(descriptor.key, SkipReason.OUT_OF_BOUNDS, detail)

    actual = text_between(root, start, end, " ")
    if not texts_match(descriptor.text, actual):
        detail = f"expected {descriptor.text[:50]!r}, found {actual[:50]!r}"
        logger.warning("Highlight %s text mismatch: %s", descriptor.key, detail)
        return SkippedHighlight(descriptor.key, SkipReason.TEXT_MISMATCH, detail)

    marks.apply_mark(start, end, mark_type, highlight_mark_attrs(descriptor))
    return None


def reconcile_highlights(
    root: Node,
    marks: MarkCapability,
    descriptors: Iterable[HighlightDescriptor],
    *,
    mark_type: str | None = None,
) -> ReconcileReport:
    """Clear highlight marks and re-apply every descriptor that still matches.

    Both offsets go through ``to_structural_position``, which attributes a
    boundary offset to the start of the following text node. A highlight
    ending exactly at the end of a textblock therefore gets a mark that runs
    across the block-close and next block-open tokens. Those tokens carry
    no text, so the marked text is unchanged apart from the block separator.

    Args:
        root: Current document snapshot.
        marks: Mark capability of the host document holding *root*.
        descriptors: Stored highlights for this document.
        mark_type: Mark type name; defaults to ``HIGHLIGHT__MARK_TYPE``.

    Returns:
        Which descriptors were applied and which were skipped, and why.
    """
    settings = get_settings().highlight
    mark_type = mark_type or settings.mark_type
    report = ReconcileReport()

    # Clear even when there is nothing to apply.
    try:
        marks.clear_marks(mark_type)
    except Exception:
        logger.exception("Failed to clear %r marks", mark_type)

    ordered = sorted(descriptors, key=lambda d: d.start_offset)
    if not ordered:
        return report

    for descriptor in ordered:
        try:
            skipped = _place(
                root, marks, descriptor, mark_type, settings.clamp_out_of_range
            )
        except Exception as exc:
            logger.exception("Failed to apply highlight %s", descriptor.key)
            skipped = SkippedHighlight(descriptor.key, SkipReason.ERROR, str(exc))

        if skipped is None:
            report.applied.append(descriptor.key)
        else:
            report.skipped.append(skipped)

    logger.debug(
        "Reconciled %d highlights: %d applied, %d skipped",
        len(ordered),
        len(report.applied),
        len(report.skipped),
    )
    return report
