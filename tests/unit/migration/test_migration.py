"""Tests for highlight id audit, backfill planning and validation."""

from __future__ import annotations

from quilltip.highlights import HighlightDescriptor, generate_highlight_id
from quilltip.migration import (
    BackfillAction,
    audit_highlights,
    plan_backfill,
    validate_migration,
)
from quilltip.tips import HighlightTip


def _hl(
    row_id: str,
    text: str = "hello",
    start: int = 0,
    end: int = 5,
    user: str = "u1",
    slug: str | None = "my-article",
    with_id: bool = False,
) -> HighlightDescriptor:
    highlight_id = None
    if with_id:
        highlight_id = generate_highlight_id(slug or "", text, start, end)
    return HighlightDescriptor(
        id=row_id,
        highlight_id=highlight_id,
        article_slug=slug,
        text=text,
        start_offset=start,
        end_offset=end,
        user_id=user,
    )


def _tip(highlight_id: str, tip_id: str = "tip-1") -> HighlightTip:
    return HighlightTip(
        id=tip_id,
        highlight_id=highlight_id,
        article_slug="my-article",
        tipper_id="t1",
        highlight_text="hello",
        amount_cents=100,
    )


class TestAudit:
    def test_counts(self) -> None:
        report = audit_highlights(
            [_hl("1", with_id=True), _hl("2", text="world"), _hl("3", text="again")],
            [],
        )
        assert report.total_highlights == 3
        assert report.with_highlight_id == 1
        assert report.without_highlight_id == 2
        assert report.percentage_complete == 33

    def test_empty(self) -> None:
        report = audit_highlights([], [])
        assert report.percentage_complete == 0
        assert not report.has_critical_issues
        assert "no backfill needed" in report.recommendations[0]

    def test_orphaned_tips(self) -> None:
        linked = _hl("1", with_id=True)
        assert linked.highlight_id is not None
        report = audit_highlights(
            [linked], [_tip(linked.highlight_id), _tip("f" * 28, tip_id="tip-2")]
        )
        (orphan,) = report.orphaned_tips
        assert orphan.tip_id == "tip-2"
        assert report.has_critical_issues
        assert any("orphaned" in r for r in report.recommendations)

    def test_duplicate_texts_grouped_per_article(self) -> None:
        report = audit_highlights(
            [
                _hl("1", user="u1"),
                _hl("2", user="u2", start=10, end=15),
                _hl("3", slug="other"),
            ],
            [],
        )
        (dup,) = report.duplicate_texts
        assert dup.key == "my-article:hello"
        assert dup.count == 2
        assert {m.user_id for m in dup.members} == {"u1", "u2"}
        assert all(not m.has_id for m in dup.members)


class TestPlanBackfill:
    def test_derives_ids_for_legacy_records(self) -> None:
        plan = plan_backfill([_hl("1"), _hl("2", text="world")])
        assert [e.record_id for e in plan.to_write] == ["1", "2"]
        assert plan.to_write[0].highlight_id == generate_highlight_id(
            "my-article", "hello", 0, 5
        )
        assert plan.collisions == []

    def test_records_with_ids_are_skipped(self) -> None:
        plan = plan_backfill([_hl("1", with_id=True), _hl("2", text="world")])
        assert plan.already_set == 1
        assert [e.record_id for e in plan.entries] == ["2"]

    def test_rerun_after_backfill_is_noop(self) -> None:
        plan = plan_backfill(
            [_hl("1", with_id=True), _hl("2", text="xyz", with_id=True)]
        )
        assert plan.entries == []
        assert plan.already_set == 2

    def test_same_user_collision_needs_review(self) -> None:
        plan = plan_backfill([_hl("1", with_id=True, user="u1"), _hl("2", user="u1")])
        (entry,) = plan.entries
        assert entry.action is BackfillAction.NEEDS_REVIEW
        assert entry.collision
        assert entry.colliding_with == "1"
        assert plan.to_write == []

    def test_different_user_collision_is_written(self) -> None:
        plan = plan_backfill([_hl("1", with_id=True, user="u1"), _hl("2", user="u2")])
        (entry,) = plan.entries
        assert entry.action is BackfillAction.WRITE
        assert entry.collision

    def test_collision_between_two_legacy_records(self) -> None:
        plan = plan_backfill([_hl("1", user="u1"), _hl("2", user="u1")])
        first, second = plan.entries
        assert first.action is BackfillAction.WRITE
        assert not first.collision
        assert second.action is BackfillAction.NEEDS_REVIEW
        assert second.colliding_with == "1"

    def test_missing_slug_is_recorded_as_error(self) -> None:
        plan = plan_backfill([_hl("1", slug=None), _hl("2", text="world")])
        (error,) = plan.errors
        assert error.record_id == "1"
        assert error.highlight_id is None
        assert "no article_slug" in (error.error or "")
        assert [e.record_id for e in plan.to_write] == ["2"]


class TestValidateMigration:
    def test_passes_when_complete_and_linked(self) -> None:
        linked = _hl("1", with_id=True)
        assert linked.highlight_id is not None
        report = validate_migration([linked], [_tip(linked.highlight_id)])
        assert report.status == "PASSED"
        assert report.passed
        assert report.valid_tip_links == 1

    def test_fails_when_ids_missing(self) -> None:
        report = validate_migration([_hl("1")], [])
        assert report.status == "FAILED"
        assert "missing" in report.critical[0]

    def test_fails_on_orphaned_tip(self) -> None:
        report = validate_migration([_hl("1", with_id=True)], [_tip("f" * 28)])
        assert report.status == "FAILED"
        assert len(report.orphaned_tips) == 1

    def test_same_user_duplicate_is_critical_warning(self) -> None:
        report = validate_migration(
            [_hl("1", with_id=True), _hl("2", with_id=True)], []
        )
        (dup,) = report.duplicate_ids
        assert dup.is_critical
        assert report.passed
        assert any("critical duplicate" in w for w in report.warnings)

    def test_different_user_duplicate_is_intentional(self) -> None:
        report = validate_migration(
            [_hl("1", with_id=True, user="u1"), _hl("2", with_id=True, user="u2")],
            [],
        )
        (dup,) = report.duplicate_ids
        assert dup.is_different_users
        assert not dup.is_critical
        assert any("intentional" in w for w in report.warnings)
