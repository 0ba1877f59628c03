"""Shared pytest fixtures for webnote tests."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from webnote.anchoring.text_index import build_text_index, find_occurrence
from webnote.config import RestoreConfig, Settings
from webnote.dom.html import parse_html
from webnote.store.memory import MemoryStore

if TYPE_CHECKING:
    from collections.abc import Callable

    from webnote.dom.range import TextRange
    from webnote.dom.tree import Document


PAGE_URL = "https://example.com/articles/cats?ref=feed#top"


def page(body: str, title: str = "Test page") -> Document:
    """Parse *body* markup inside a minimal HTML page."""
    return parse_html(
        f"<!DOCTYPE html><html><head><title>{title}</title></head>"
        f"<body>{body}</body></html>"
    )


def select(document: Document, text: str, occurrence: int = 1) -> TextRange:
    """Range over the *occurrence*-th match of *text* in the body."""
    assert document.body is not None
    found = find_occurrence(build_text_index(document.body), text, occurrence)
    assert found is not None, f"{text!r} not in document"
    return found


@pytest.fixture
def make_page() -> Callable[..., Document]:
    return page


@pytest.fixture
def settings() -> Settings:
    """Settings isolated from .env, with near-instant stabilisation."""
    return Settings(
        _env_file=None,  # type: ignore[call-arg]
        restore=RestoreConfig(
            stabilize_timeout=0.2, quiet_period=0.01, settle_delay=0
        ),
    )


@pytest.fixture
def memory_store() -> MemoryStore:
    return MemoryStore()
