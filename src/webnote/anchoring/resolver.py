"""Restoration state machine: stored descriptor -> live range.

Three tiers, tried in strict order:

1. ``ADDRESS_MATCH`` -- replay both structural addresses and accept the
   range only if its normalised text equals the stored text.  Exact and
   cheap when the tree is unchanged.
2. ``CONTEXT_SEARCH`` -- search the flattened body text (case-insensitive)
   for ``context_before + text + context_after``; the first occurrence
   whose text segment maps onto text nodes wins.  Tolerates structural
   change and disambiguates repeated text by its neighbours.
3. ``BARE_TEXT_SEARCH`` -- first case-insensitive occurrence of the text
   alone.  Accepts the first occurrence even when the text repeats; that
   ambiguity is a known limitation.

Each tier either returns a range or raises an ``AnchoringError``; the
machine records the failure and moves to the next state.  When the last
tier fails the outcome is ``EXHAUSTED``.
"""

from __future__ import annotations

import enum
import logging
import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from webnote.anchoring.errors import (
    AddressUnresolvable,
    AnchoringError,
    SearchExhausted,
    TextMismatch,
)
from webnote.anchoring.path import resolve
from webnote.anchoring.text_index import (
    TextIndex,
    build_text_index,
    fold_case,
    map_range,
)
from webnote.dom.range import TextRange

if TYPE_CHECKING:
    from collections.abc import Callable

    from webnote.dom.tree import Document
    from webnote.models import SpanDescriptor

logger = logging.getLogger(__name__)

_WHITESPACE_RUN = re.compile(r"\s+")


def normalize_text(text: str) -> str:
    """Collapse whitespace runs to one space and trim."""
    return _WHITESPACE_RUN.sub(" ", text).strip()


class ResolveState(enum.Enum):
    ADDRESS_MATCH = "address_match"
    CONTEXT_SEARCH = "context_search"
    BARE_TEXT_SEARCH = "bare_text_search"
    RESOLVED = "resolved"
    EXHAUSTED = "exhausted"

    @property
    def terminal(self) -> bool:
        return self in (ResolveState.RESOLVED, ResolveState.EXHAUSTED)


_NEXT_STATE = {
    ResolveState.ADDRESS_MATCH: ResolveState.CONTEXT_SEARCH,
    ResolveState.CONTEXT_SEARCH: ResolveState.BARE_TEXT_SEARCH,
    ResolveState.BARE_TEXT_SEARCH: ResolveState.EXHAUSTED,
}


@dataclass
class Resolution:
    """Outcome of resolving one descriptor.

    Attributes:
        state: ``RESOLVED`` or ``EXHAUSTED``.
        range: The accepted live range (None when exhausted).
        strategy: The tier that produced the range.
        failures: Errors recovered along the way, in tier order.
    """

    state: ResolveState
    range: TextRange | None = None
    strategy: ResolveState | None = None
    failures: list[AnchoringError] = field(default_factory=list)

    @property
    def resolved(self) -> bool:
        return self.state is ResolveState.RESOLVED


class SpanResolver:
    """Resolves stored descriptors against one document."""

    def __init__(self, document: Document) -> None:
        self.document = document
        self._index: TextIndex | None = None
        self._tiers: dict[
            ResolveState, Callable[[str, SpanDescriptor], TextRange]
        ] = {
            ResolveState.ADDRESS_MATCH: self.match_address,
            ResolveState.CONTEXT_SEARCH: self.search_context,
            ResolveState.BARE_TEXT_SEARCH: self.search_bare_text,
        }

    def resolve(self, text: str, position: SpanDescriptor) -> Resolution:
        """Run the tiers in order until one produces a range."""
        # The tree may have changed since the last call (markers applied).
        self._index = None
        state = ResolveState.ADDRESS_MATCH
        failures: list[AnchoringError] = []
        while not state.terminal:
            try:
                found = self._tiers[state](text, position)
            except AnchoringError as exc:
                logger.debug("Tier %s failed for %r: %s", state.value, text, exc)
                failures.append(exc)
                state = _NEXT_STATE[state]
                continue
            logger.debug("Tier %s resolved %r", state.value, text)
            return Resolution(
                ResolveState.RESOLVED, range=found, strategy=state, failures=failures
            )
        return Resolution(ResolveState.EXHAUSTED, failures=failures)

    # --- Tier 1 ---

    def match_address(self, text: str, position: SpanDescriptor) -> TextRange:
        start = resolve(self.document, position.start_address)
        end = resolve(self.document, position.end_address)
        if start is None or end is None:
            msg = f"{position.start_address} / {position.end_address} do not resolve"
            raise AddressUnresolvable(msg)
        try:
            found = TextRange(start, position.start_offset, end, position.end_offset)
        except IndexError as exc:
            raise AddressUnresolvable(str(exc)) from exc
        if not found.is_ordered():
            msg = "Resolved end precedes resolved start"
            raise AddressUnresolvable(msg)
        actual = normalize_text(found.text())
        expected = normalize_text(text)
        if actual != expected:
            raise TextMismatch(expected, actual)
        return found

    # --- Tiers 2 and 3 ---

    @property
    def index(self) -> TextIndex:
        if self._index is None:
            body = self.document.body or self.document
            self._index = build_text_index(body)
        return self._index

    def search_context(self, text: str, position: SpanDescriptor) -> TextRange:
        key = fold_case(position.context_before + text + position.context_after)
        haystack = self.index.folded
        search_from = 0
        while (found_at := haystack.find(key, search_from)) != -1:
            target_start = found_at + len(position.context_before)
            found = map_range(self.index, target_start, target_start + len(text))
            if found is not None:
                return found
            search_from = found_at + 1
        msg = "No occurrence of the text with its stored context"
        raise SearchExhausted(msg)

    def search_bare_text(self, text: str, position: SpanDescriptor) -> TextRange:
        found_at = self.index.folded.find(fold_case(text))
        if found_at != -1:
            found = map_range(self.index, found_at, found_at + len(text))
            if found is not None:
                return found
        msg = f"Text {text!r} not found in document"
        raise SearchExhausted(msg)
