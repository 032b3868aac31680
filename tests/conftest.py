"""Shared pytest fixtures for quilltip tests."""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest

from quilltip.config import get_settings

if TYPE_CHECKING:
    from collections.abc import Iterator

# Env prefixes that change highlight and tip behaviour under test.
_SETTINGS_PREFIXES = ("HIGHLIGHT__", "TIP__")


@pytest.fixture(autouse=True)
def _fresh_settings(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Give every test default settings and a cold ``get_settings`` cache."""
    for key in list(os.environ):
        if key.startswith(_SETTINGS_PREFIXES):
            monkeypatch.delenv(key, raising=False)
    get_settings.cache_clear()

    yield

    get_settings.cache_clear()
