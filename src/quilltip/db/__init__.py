"""Database module for quilltip.

Provides async SQLModel operations with PostgreSQL.
"""

from __future__ import annotations

from quilltip.db.engine import (
    close_db,
    create_schema,
    get_engine,
    get_session,
    init_db,
    is_db_configured,
)
from quilltip.db.highlights import (
    delete_highlight,
    list_highlights,
    load_highlights,
    save_highlight,
    set_highlight_id,
    set_highlight_ids,
)
from quilltip.db.models import Highlight, HighlightTip
from quilltip.db.tips import (
    create_tip,
    get_tips_for_article,
    get_tips_for_highlight,
    list_tips,
)

__all__ = [
    "Highlight",
    "HighlightTip",
    "close_db",
    "create_schema",
    "create_tip",
    "delete_highlight",
    "get_engine",
    "get_session",
    "get_tips_for_article",
    "get_tips_for_highlight",
    "init_db",
    "is_db_configured",
    "list_highlights",
    "list_tips",
    "load_highlights",
    "save_highlight",
    "set_highlight_id",
    "set_highlight_ids",
]
