"""Tests for pydantic-settings configuration."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from quilltip.config import HighlightConfig, Settings, get_settings


class TestDefaults:
    def test_highlight_defaults(self) -> None:
        s = Settings(_env_file=None)  # type: ignore[call-arg]
        assert s.highlight.min_length == 3
        assert s.highlight.max_length == 5000
        assert s.highlight.default_color == "#FFEB3B"
        assert s.highlight.mark_type == "highlight"
        assert s.highlight.clamp_out_of_range is False

    def test_tip_defaults(self) -> None:
        s = Settings(_env_file=None)  # type: ignore[call-arg]
        assert s.tip.platform_fee_bps == 250
        assert s.tip.top_n == 10

    def test_database_unset(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("DATABASE__URL", raising=False)
        s = Settings(_env_file=None)  # type: ignore[call-arg]
        assert s.database.url is None
        assert s.database.pool_size == 5
        assert s.database.max_overflow == 10

    def test_log_dir_default(self) -> None:
        s = Settings(_env_file=None)  # type: ignore[call-arg]
        assert s.app.log_dir == Path("logs")


class TestEnvOverrides:
    def test_nested_delimiter(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("HIGHLIGHT__MIN_LENGTH", "5")
        monkeypatch.setenv("HIGHLIGHT__CLAMP_OUT_OF_RANGE", "true")
        monkeypatch.setenv("TIP__PLATFORM_FEE_BPS", "500")
        s = Settings(_env_file=None)  # type: ignore[call-arg]
        assert s.highlight.min_length == 5
        assert s.highlight.clamp_out_of_range is True
        assert s.tip.platform_fee_bps == 500

    def test_database_url(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DATABASE__URL", "postgresql+asyncpg://localhost/qt")
        s = Settings(_env_file=None)  # type: ignore[call-arg]
        assert s.database.url == "postgresql+asyncpg://localhost/qt"

    def test_env_file(self, tmp_path: Path) -> None:
        env_file = tmp_path / ".env"
        env_file.write_text("HIGHLIGHT__MARK_TYPE=tip_highlight\n")
        s = Settings(_env_file=env_file)  # type: ignore[call-arg]
        assert s.highlight.mark_type == "tip_highlight"


class TestValidation:
    @pytest.mark.parametrize("colour", ["yellow", "#FFF", "#GGGGGG", "FFEB3B"])
    def test_bad_colour_rejected(self, colour: str) -> None:
        with pytest.raises(ValidationError, match="DEFAULT_COLOR"):
            HighlightConfig(default_color=colour)

    def test_zero_min_length_rejected(self) -> None:
        with pytest.raises(ValidationError, match="MIN_LENGTH"):
            HighlightConfig(min_length=0)

    def test_max_below_min_rejected(self) -> None:
        with pytest.raises(ValidationError, match="MAX_LENGTH"):
            HighlightConfig(min_length=10, max_length=5)


class TestGetSettings:
    def test_cached(self) -> None:
        assert get_settings() is get_settings()

    def test_cache_clear_rereads_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        get_settings()
        monkeypatch.setenv("TIP__TOP_N", "3")
        get_settings.cache_clear()
        assert get_settings().tip.top_n == 3
