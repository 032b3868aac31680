"""Tests for the persisted highlight descriptor."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from quilltip.highlights import HighlightDescriptor


def _wire(**overrides) -> dict:
    data = {
        "id": "row-1",
        "highlightId": "0123456789abcdef0123456789ab",
        "articleSlug": "my-article",
        "text": "quick",
        "startOffset": 4,
        "endOffset": 9,
        "startContainerPath": "text.5",
        "endContainerPath": "text.10",
        "color": "#FFEB3B",
        "isPublic": True,
        "userId": "u1",
        "createdAt": "2026-01-02T03:04:05Z",
    }
    data.update(overrides)
    return data


class TestHighlightDescriptor:
    def test_reads_camel_case(self) -> None:
        descriptor = HighlightDescriptor.model_validate(_wire())
        assert descriptor.start_offset == 4
        assert descriptor.highlight_id == "0123456789abcdef0123456789ab"
        assert descriptor.user_id == "u1"

    def test_accepts_snake_case(self) -> None:
        descriptor = HighlightDescriptor(
            text="quick", start_offset=4, end_offset=9, user_id="u1"
        )
        assert descriptor.highlight_id is None
        assert descriptor.color == "#FFEB3B"

    def test_wire_round_trip(self) -> None:
        wire = _wire()
        again = HighlightDescriptor.model_validate(wire).to_wire()
        assert again["startOffset"] == 4
        assert again["highlightId"] == wire["highlightId"]
        assert again["articleSlug"] == "my-article"
        assert "start_offset" not in again

    def test_end_must_exceed_start(self) -> None:
        with pytest.raises(ValidationError, match="must be greater"):
            HighlightDescriptor.model_validate(_wire(startOffset=9, endOffset=9))

    def test_negative_offset_rejected(self) -> None:
        with pytest.raises(ValidationError):
            HighlightDescriptor.model_validate(_wire(startOffset=-1))

    def test_malformed_highlight_id_rejected(self) -> None:
        with pytest.raises(ValidationError, match="lowercase hex"):
            HighlightDescriptor.model_validate(_wire(highlightId="XYZ"))

    def test_legacy_record_without_highlight_id(self) -> None:
        wire = _wire()
        del wire["highlightId"]
        descriptor = HighlightDescriptor.model_validate(wire)
        assert descriptor.highlight_id is None

    def test_key_prefers_storage_id(self) -> None:
        descriptor = HighlightDescriptor.model_validate(_wire())
        assert descriptor.key == "row-1"

    def test_key_falls_back_to_offsets(self) -> None:
        descriptor = HighlightDescriptor(
            text="quick", start_offset=4, end_offset=9, user_id="u1"
        )
        assert descriptor.key == "4-9"

    def test_frozen(self) -> None:
        descriptor = HighlightDescriptor.model_validate(_wire())
        with pytest.raises(ValidationError):
            descriptor.text = "changed"  # type: ignore[misc]
