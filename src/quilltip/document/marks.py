"""Mark capability over a document tree.

The host document framework owns the marks; the highlight core only talks
to it through ``MarkCapability``. ``MarkedDocument`` is the in-memory
implementation used server-side and in tests.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from quilltip.document.nodes import text_between

if TYPE_CHECKING:
    from quilltip.document.nodes import Node

logger = logging.getLogger(__name__)


@runtime_checkable
class MarkCapability(Protocol):
    """Imperative mark API exposed by a host document."""

    def clear_marks(self, mark_type: str) -> None:
        """Remove every mark of *mark_type* from the document."""
        ...

    def apply_mark(
        self, start: int, end: int, mark_type: str, attrs: dict[str, Any]
    ) -> None:
        """Apply a mark of *mark_type* over structural range ``[start, end)``."""
        ...


@dataclass(frozen=True)
class AppliedMark:
    """A mark applied over a structural range."""

    start: int
    end: int
    mark_type: str
    attrs: dict[str, Any] = field(default_factory=dict, compare=False)


class MarkedDocument:
    """A document snapshot plus the marks applied to it.

    Implements ``MarkCapability``. The tree itself is immutable; marks are
    the only mutable state.
    """

    def __init__(self, root: Node) -> None:
        self.root = root
        self.marks: list[AppliedMark] = []

    @property
    def size(self) -> int:
        return self.root.content_size

    def clear_marks(self, mark_type: str) -> None:
        before = len(self.marks)
        self.marks = [m for m in self.marks if m.mark_type != mark_type]
        logger.debug("Cleared %d %r marks", before - len(self.marks), mark_type)

    def apply_mark(
        self, start: int, end: int, mark_type: str, attrs: dict[str, Any]
    ) -> None:
        if start < 0 or end > self.size or end <= start:
            msg = (
                f"Mark range [{start}, {end}) is outside document "
                f"of size {self.size}"
            )
            raise ValueError(msg)

        mark = AppliedMark(start=start, end=end, mark_type=mark_type, attrs=dict(attrs))

        # Re-applying the same mark over the same range replaces it.
        mark_id = attrs.get("id")
        self.marks = [
            m
            for m in self.marks
            if not (
                m == mark and mark_id is not None and m.attrs.get("id") == mark_id
            )
        ]
        self.marks.append(mark)

    def marks_of_type(self, mark_type: str) -> list[AppliedMark]:
        return [m for m in self.marks if m.mark_type == mark_type]

    def marked_text(self, mark: AppliedMark) -> str:
        """Return the text currently covered by *mark*."""
        return text_between(self.root, mark.start, mark.end)
