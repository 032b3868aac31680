#!/usr/bin/env python3
"""Audit, backfill and validate highlight ids on stored highlights.

Thin wrapper around ``quilltip.cli_backfill`` for standalone use.

Usage:
    quilltip-highlights audit                          # via entry point
    python scripts/backfill_highlight_ids.py backfill --dry-run
"""

from quilltip.cli_backfill import main

if __name__ == "__main__":
    main()
