"""Tip records keyed by highlight id, and their aggregation for display."""

from quilltip.tips.aggregate import (
    article_tip_stats,
    format_tip_amount,
    group_tips_by_highlight,
    heatmap_color,
    tip_breakdown,
    tip_totals_by_highlight,
    truncate_text,
)
from quilltip.tips.models import (
    ArticleTipStats,
    HighlightTip,
    HighlightTipGroup,
    TipBreakdown,
)

__all__ = [
    "ArticleTipStats",
    "HighlightTip",
    "HighlightTipGroup",
    "TipBreakdown",
    "article_tip_stats",
    "format_tip_amount",
    "group_tips_by_highlight",
    "heatmap_color",
    "tip_breakdown",
    "tip_totals_by_highlight",
    "truncate_text",
]
