"""Tests for store selection by configuration."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from webnote.store.factory import clear_store_cache, get_store
from webnote.store.json_file import JsonFileStore
from webnote.store.memory import MemoryStore

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path


@pytest.fixture(autouse=True)
def _fresh_store_cache() -> Iterator[None]:
    clear_store_cache()
    yield
    clear_store_cache()


class TestGetStore:
    def test_memory_backend_is_shared(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("STORE__BACKEND", "memory")
        store = get_store()
        assert isinstance(store, MemoryStore)
        assert get_store() is store

    def test_json_backend_uses_configured_path(
        self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
    ) -> None:
        monkeypatch.setenv("STORE__BACKEND", "json")
        monkeypatch.setenv("STORE__PATH", str(tmp_path / "a.json"))
        store = get_store()
        assert isinstance(store, JsonFileStore)
        assert store.path == tmp_path / "a.json"

    def test_clear_resets_memory_store(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("STORE__BACKEND", "memory")
        first = get_store()
        clear_store_cache()
        assert get_store() is not first
