"""Audit, backfill and validation passes for legacy highlight records."""

from quilltip.migration.audit import AuditReport, audit_highlights
from quilltip.migration.backfill import (
    BackfillAction,
    BackfillEntry,
    BackfillPlan,
    plan_backfill,
)
from quilltip.migration.validate import ValidationReport, validate_migration

__all__ = [
    "AuditReport",
    "BackfillAction",
    "BackfillEntry",
    "BackfillPlan",
    "ValidationReport",
    "audit_highlights",
    "plan_backfill",
    "validate_migration",
]
