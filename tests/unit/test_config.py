"""Tests for pydantic-settings configuration."""

from __future__ import annotations

import os
from pathlib import Path

import pytest
from pydantic import ValidationError

from webnote.config import AnchorConfig, Settings, get_settings


def _clear_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in list(os.environ):
        if key.startswith(("ANCHOR__", "RESTORE__", "STORE__", "APP__")):
            monkeypatch.delenv(key, raising=False)


class TestDefaults:
    """Defaults match the documented behaviour."""

    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        _clear_env(monkeypatch)
        s = Settings(_env_file=None)  # type: ignore[call-arg]
        assert s.anchor.context_length == 30
        assert s.anchor.colors == ("yellow", "green", "blue", "pink", "purple")
        assert s.anchor.default_color == "yellow"
        assert s.restore.stabilize_timeout == 2.0
        assert s.restore.quiet_period == 0.3
        assert s.restore.settle_delay == 0.1
        assert s.store.backend == "json"
        assert s.store.path == Path("data/annotations.json")
        assert s.app.log_dir == Path("logs")


class TestOverrides:
    """Nested environment variables."""

    def test_nested_env_vars(self, monkeypatch: pytest.MonkeyPatch) -> None:
        _clear_env(monkeypatch)
        monkeypatch.setenv("ANCHOR__CONTEXT_LENGTH", "12")
        monkeypatch.setenv("STORE__BACKEND", "memory")
        monkeypatch.setenv("RESTORE__QUIET_PERIOD", "0.5")
        s = Settings(_env_file=None)  # type: ignore[call-arg]
        assert s.anchor.context_length == 12
        assert s.store.backend == "memory"
        assert s.restore.quiet_period == 0.5

    def test_unknown_backend_rejected(self, monkeypatch: pytest.MonkeyPatch) -> None:
        _clear_env(monkeypatch)
        monkeypatch.setenv("STORE__BACKEND", "redis")
        with pytest.raises(ValidationError):
            Settings(_env_file=None)  # type: ignore[call-arg]

    def test_default_color_must_be_in_palette(self) -> None:
        with pytest.raises(ValidationError, match="ANCHOR__DEFAULT_COLOR"):
            AnchorConfig(colors=("green",), default_color="yellow")


class TestGetSettings:
    def test_cached(self) -> None:
        get_settings.cache_clear()
        try:
            assert get_settings() is get_settings()
        finally:
            get_settings.cache_clear()
