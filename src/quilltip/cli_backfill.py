"""Audit, backfill and validate highlight ids on stored highlights.

Legacy highlights were stored before highlight ids existed, so their tips
cannot be joined back to them. Run the three phases in order:

Usage:
    quilltip-highlights audit                     # read-only report
    quilltip-highlights backfill --dry-run        # preview derived ids
    quilltip-highlights backfill --batch-size 50  # write ids
    quilltip-highlights validate                  # exit 1 unless PASSED

Idempotent: highlights that already have an id are skipped.
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from typing import TYPE_CHECKING
from uuid import UUID

from rich.console import Console
from rich.table import Table

from quilltip import setup_logging
from quilltip.db.engine import is_db_configured

if TYPE_CHECKING:
    from quilltip.migration import AuditReport, BackfillPlan, ValidationReport

console = Console()

BATCH_SIZE = 100

# Rows shown in detail tables
DETAIL_ROWS = 10


def _print_audit(report: AuditReport, con: Console) -> None:
    con.print(f"Highlights: [bold]{report.total_highlights}[/]")
    con.print(f"  With id:    {report.with_highlight_id}")
    con.print(f"  Without id: {report.without_highlight_id}")
    con.print(f"  Complete:   {report.percentage_complete}%")
    con.print(f"Tips: [bold]{report.total_tips}[/]")
    con.print(f"  Orphaned:   {len(report.orphaned_tips)}")

    if report.orphaned_tips:
        table = Table(title="Orphaned tips")
        table.add_column("Tip")
        table.add_column("Highlight id", style="cyan")
        table.add_column("Text")
        for tip in report.orphaned_tips[:DETAIL_ROWS]:
            table.add_row(tip.tip_id or "-", tip.highlight_id, tip.text)
        con.print(table)

    if report.duplicate_texts:
        table = Table(title="Duplicate texts")
        table.add_column("Key")
        table.add_column("Count", justify="right")
        table.add_column("Users")
        for dup in report.duplicate_texts[:DETAIL_ROWS]:
            users = ", ".join(sorted({m.user_id for m in dup.members}))
            table.add_row(dup.key, str(dup.count), users)
        con.print(table)

    con.print()
    for line in report.recommendations:
        con.print(f"  - {line}")


def _print_plan(plan: BackfillPlan, con: Console) -> None:
    if not plan.collisions:
        return
    table = Table(title="Collisions")
    table.add_column("Record")
    table.add_column("Highlight id", style="cyan")
    table.add_column("Collides with")
    table.add_column("Action")
    for entry in plan.collisions[:DETAIL_ROWS]:
        table.add_row(
            entry.record_id or "-",
            entry.highlight_id or "-",
            entry.colliding_with or "-",
            entry.action.value,
        )
    con.print(table)


def _print_validation(report: ValidationReport, con: Console) -> None:
    colour = "green" if report.passed else "red"
    con.print(f"Validation [bold {colour}]{report.status}[/]")
    con.print(f"  Highlights:      {report.total_highlights}")
    con.print(f"  With id:         {report.with_highlight_id}")
    con.print(f"  Without id:      {report.without_highlight_id}")
    con.print(f"  Tips:            {report.total_tips}")
    con.print(f"  Valid tip links: {report.valid_tip_links}")
    con.print(f"  Duplicate ids:   {len(report.duplicate_ids)}")
    for issue in report.critical:
        con.print(f"  [red]Critical:[/] {issue}")
    for warning in report.warnings:
        con.print(f"  [yellow]Warning:[/] {warning}")


async def _cmd_audit(*, console: Console | None = None) -> AuditReport:
    """Print the read-only audit report."""
    from quilltip.db.highlights import list_highlights
    from quilltip.db.tips import list_tips
    from quilltip.migration import audit_highlights

    con = console or globals()["console"]
    report = audit_highlights(await list_highlights(), await list_tips())
    _print_audit(report, con)
    return report


async def _cmd_backfill(
    *,
    dry_run: bool,
    batch_size: int = BATCH_SIZE,
    console: Console | None = None,
) -> BackfillPlan:
    """Derive and write ids for highlights that lack one."""
    from quilltip.db.highlights import list_highlights, set_highlight_ids
    from quilltip.migration import plan_backfill

    con = console or globals()["console"]
    plan = plan_backfill(await list_highlights())
    pending = plan.to_write

    con.print(
        f"Found [bold]{len(plan.entries)}[/] highlight(s) without an id "
        f"({plan.already_set} already set)."
    )
    _print_plan(plan, con)

    written = 0
    if not pending:
        con.print("[green]Nothing to write.[/]")
    elif dry_run:
        for entry in pending[:DETAIL_ROWS]:
            con.print(
                f"  [dim]Would set[/] {entry.record_id} -> {entry.highlight_id}"
            )
    else:
        # One transaction per batch.
        for i in range(0, len(pending), batch_size):
            batch = pending[i : i + batch_size]
            written += await set_highlight_ids(
                [
                    (UUID(e.record_id), e.highlight_id)
                    for e in batch
                    if e.record_id and e.highlight_id
                ]
            )
            con.print(
                f"  Batch {i // batch_size + 1}: {written}/{len(pending)} written"
            )

    mode = "[yellow]DRY RUN[/] " if dry_run else ""
    con.print()
    con.print(f"{mode}Backfill complete:")
    con.print(f"  Total:        {plan.total_highlights}")
    con.print(f"  Skipped:      {plan.already_set}")
    con.print(f"  To write:     {len(pending)}")
    con.print(f"  Written:      {written}")
    con.print(f"  Needs review: {len(plan.needs_review)}")
    con.print(f"  Errors:       {len(plan.errors)}")
    for entry in plan.errors[:DETAIL_ROWS]:
        con.print(f"  [red]Error[/] {entry.record_id}: {entry.error}")
    return plan


async def _cmd_validate(*, console: Console | None = None) -> ValidationReport:
    """Print the validation report."""
    from quilltip.db.highlights import list_highlights
    from quilltip.db.tips import list_tips
    from quilltip.migration import validate_migration

    con = console or globals()["console"]
    report = validate_migration(await list_highlights(), await list_tips())
    _print_validation(report, con)
    return report


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="quilltip-highlights",
        description="Audit, backfill and validate highlight ids.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("audit", help="Report highlights missing ids and orphaned tips")

    backfill_p = sub.add_parser("backfill", help="Write derived highlight ids")
    backfill_p.add_argument(
        "--dry-run",
        action="store_true",
        help="Report what would be written without modifying the database.",
    )
    backfill_p.add_argument(
        "--batch-size",
        type=int,
        default=BATCH_SIZE,
        help=f"Ids written per transaction (default: {BATCH_SIZE})",
    )

    sub.add_parser("validate", help="Check every highlight has an id")
    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the highlight id migration."""
    args = _build_parser().parse_args(argv)

    if not is_db_configured():
        console.print("[red]Error:[/] DATABASE__URL not set")
        sys.exit(1)

    setup_logging()

    async def _run() -> int:
        from quilltip.db.engine import close_db, init_db

        await init_db()
        try:
            match args.command:
                case "audit":
                    await _cmd_audit()
                case "backfill":
                    await _cmd_backfill(
                        dry_run=args.dry_run, batch_size=args.batch_size
                    )
                case "validate":
                    report = await _cmd_validate()
                    return 0 if report.passed else 1
            return 0
        finally:
            await close_db()

    sys.exit(asyncio.run(_run()))
