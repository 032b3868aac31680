"""Group and summarise tips per highlight (heatmaps, top highlights)."""

from __future__ import annotations

from typing import TYPE_CHECKING

from quilltip.config import get_settings
from quilltip.tips.models import ArticleTipStats, HighlightTipGroup, TipBreakdown

if TYPE_CHECKING:
    from collections.abc import Iterable

    from quilltip.tips.models import HighlightTip


def group_tips_by_highlight(tips: Iterable[HighlightTip]) -> list[HighlightTipGroup]:
    """Group tips by highlight id, in order of first appearance."""
    groups: dict[str, HighlightTipGroup] = {}
    for tip in tips:
        group = groups.get(tip.highlight_id)
        if group is None:
            group = HighlightTipGroup(
                highlight_id=tip.highlight_id,
                text=tip.highlight_text,
                start_offset=tip.start_offset,
                end_offset=tip.end_offset,
            )
            groups[tip.highlight_id] = group
        group.tip_count += 1
        group.total_amount_cents += tip.amount_cents
    return list(groups.values())


def tip_totals_by_highlight(tips: Iterable[HighlightTip]) -> dict[str, int]:
    """Map highlight id to total tipped cents."""
    return {
        g.highlight_id: g.total_amount_cents for g in group_tips_by_highlight(tips)
    }


def article_tip_stats(
    tips: Iterable[HighlightTip], top_n: int | None = None
) -> ArticleTipStats:
    """Summarise an article's tips.

    Args:
        tips: Every tip recorded for the article.
        top_n: How many highlights to return, most tipped first;
            defaults to ``TIP__TOP_N``.

    Returns:
        Totals plus the top highlights. Ties keep first-seen order.
    """
    if top_n is None:
        top_n = get_settings().tip.top_n

    tips = list(tips)
    groups = group_tips_by_highlight(tips)
    top = sorted(groups, key=lambda g: g.total_amount_cents, reverse=True)[:top_n]

    return ArticleTipStats(
        total_tips=len(tips),
        total_amount_cents=sum(t.amount_cents for t in tips),
        unique_tippers=len({t.tipper_id for t in tips}),
        top_highlights=top,
    )


def _clamp(value: float) -> int:
    return max(0, min(255, int(value)))


def heatmap_color(amount: float, max_amount: float) -> str:
    """Heatmap colour for *amount* relative to *max_amount*.

    Yellow for low amounts, through orange, to red for the most tipped.
    """
    if max_amount == 0:
        return "rgb(255, 255, 200)"

    intensity = min(amount / max_amount, 1)

    if intensity < 0.33:
        green, blue = _clamp(255 - intensity * 3 * 100), 150
    elif intensity < 0.66:
        green, blue = _clamp(200 - (intensity - 0.33) * 3 * 100), 100
    else:
        green, blue = _clamp(100 - (intensity - 0.66) * 3 * 100), 50
    return f"rgb(255, {green}, {blue})"


def tip_breakdown(amount_cents: int, fee_bps: int | None = None) -> TipBreakdown:
    """Split *amount_cents* into a floored basis-point fee and the author share."""
    if fee_bps is None:
        fee_bps = get_settings().tip.platform_fee_bps
    platform_fee = (amount_cents * fee_bps) // 10_000
    return TipBreakdown(
        platform_fee_cents=platform_fee,
        author_share_cents=amount_cents - platform_fee,
    )


def format_tip_amount(amount_cents: int) -> str:
    """Format cents as US dollars, e.g. ``$1.50``."""
    sign = "-" if amount_cents < 0 else ""
    return f"{sign}${abs(amount_cents) / 100:,.2f}"


def truncate_text(text: str, max_length: int = 100) -> str:
    """Truncate *text* to *max_length* characters, adding an ellipsis."""
    if len(text) <= max_length:
        return text
    return text[:max_length] + "..."
