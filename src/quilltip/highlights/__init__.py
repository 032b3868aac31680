"""Highlight anchoring: extraction, identity, position mapping, reconciliation."""

from quilltip.highlights.extractor import (
    container_path,
    create_highlight_descriptor,
    extract_highlight,
)
from quilltip.highlights.identity import (
    build_tip_memo,
    ensure_highlight_id,
    generate_highlight_id,
    is_valid_highlight_id,
)
from quilltip.highlights.models import (
    DEFAULT_HIGHLIGHT_COLOR,
    HighlightDescriptor,
    HighlightFragment,
)
from quilltip.highlights.position_map import (
    text_length,
    to_structural_position,
    to_text_offset,
)
from quilltip.highlights.reconciler import (
    ReconcileReport,
    SkippedHighlight,
    SkipReason,
    reconcile_highlights,
    texts_match,
)

__all__ = [
    "DEFAULT_HIGHLIGHT_COLOR",
    "HighlightDescriptor",
    "HighlightFragment",
    "ReconcileReport",
    "SkipReason",
    "SkippedHighlight",
    "build_tip_memo",
    "container_path",
    "create_highlight_descriptor",
    "ensure_highlight_id",
    "extract_highlight",
    "generate_highlight_id",
    "is_valid_highlight_id",
    "reconcile_highlights",
    "text_length",
    "texts_match",
    "to_structural_position",
    "to_text_offset",
]
