"""Highlight data models.

``HighlightDescriptor`` is the persisted shape of a highlight. It
serialises with camelCase keys (``startOffset``, ``highlightId``...) so
stored records round-trip exactly, and accepts snake_case on input.

``HighlightFragment`` is the pure output of the range extractor: the
descriptor minus identity and ownership.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Self

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

DEFAULT_HIGHLIGHT_COLOR = "#FFEB3B"

HIGHLIGHT_ID_LENGTH = 28
HIGHLIGHT_ID_PATTERN = re.compile(rf"^[a-f0-9]{{{HIGHLIGHT_ID_LENGTH}}}$")


def _utcnow() -> datetime:
    """Return current UTC time as timezone-aware datetime."""
    return datetime.now(UTC)


@dataclass(frozen=True)
class HighlightFragment:
    """Text range derived from a live selection, ready to become a descriptor.

    Attributes:
        text: Verbatim selected text (multi-block selections joined by a space).
        start_offset: Text offset of the selection start.
        end_offset: Text offset of the selection end (exclusive).
        start_container_path: Advisory locator, ``"text.<from>"``.
        end_container_path: Advisory locator, ``"text.<to>"``.
    """

    text: str
    start_offset: int
    end_offset: int
    start_container_path: str
    end_container_path: str


class HighlightDescriptor(BaseModel):
    """A persisted user highlight.

    ``highlight_id`` is optional on read (legacy records) but required on
    every new record; see ``create_highlight_descriptor``.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    id: str | None = None
    highlight_id: str | None = None
    article_slug: str | None = None
    text: str
    start_offset: int = Field(ge=0)
    end_offset: int = Field(ge=0)
    start_container_path: str = ""
    end_container_path: str = ""
    color: str = DEFAULT_HIGHLIGHT_COLOR
    note: str | None = None
    is_public: bool = True
    user_id: str
    user_name: str | None = None
    created_at: datetime = Field(default_factory=_utcnow)

    @field_validator("highlight_id")
    @classmethod
    def _check_highlight_id(cls, value: str | None) -> str | None:
        if value is not None and not HIGHLIGHT_ID_PATTERN.match(value):
            msg = f"highlight_id must be {HIGHLIGHT_ID_LENGTH} lowercase hex chars"
            raise ValueError(msg)
        return value

    @model_validator(mode="after")
    def _check_range(self) -> Self:
        if self.end_offset <= self.start_offset:
            msg = (
                f"end_offset ({self.end_offset}) must be greater than "
                f"start_offset ({self.start_offset})"
            )
            raise ValueError(msg)
        return self

    @property
    def key(self) -> str:
        """Identity used in logs and reports: storage id, else highlight id."""
        return self.id or self.highlight_id or f"{self.start_offset}-{self.end_offset}"

    def to_wire(self) -> dict:
        """Serialise to the camelCase persisted shape."""
        return self.model_dump(mode="json", by_alias=True)
