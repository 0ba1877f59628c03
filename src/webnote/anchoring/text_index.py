"""Flattened text index of a subtree.

Pass 1 of the search-based restoration tiers: a depth-first walk records
where each text node's characters fall in the concatenated text of the
subtree.  ``map_range`` turns an offset pair in that concatenation back into
a live ``TextRange``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import cached_property
from typing import TYPE_CHECKING

from webnote.dom.range import TextRange

if TYPE_CHECKING:
    from webnote.dom.tree import Element, Text


@dataclass(frozen=True)
class IndexEntry:
    """One text node's contribution to the flattened text."""

    node: Text
    start: int  # Offset of the node's first character in the flattened text
    text: str

    @property
    def end(self) -> int:
        return self.start + len(self.text)


def fold_case(text: str) -> str:
    """Lower-case *text* without changing its length.

    Characters whose lower-case form is longer (e.g. ``"İ"``) are kept as-is
    so offsets in the folded string are offsets in the original.
    """
    return "".join(c if len(lower := c.lower()) != 1 else lower for c in text)


@dataclass
class TextIndex:
    """Ordered index entries plus the concatenated text they describe."""

    entries: list[IndexEntry] = field(default_factory=list)

    def __len__(self) -> int:
        return self.entries[-1].end if self.entries else 0

    @cached_property
    def text(self) -> str:
        return "".join(entry.text for entry in self.entries)

    @cached_property
    def folded(self) -> str:
        return fold_case(self.text)


def build_text_index(root: Element) -> TextIndex:
    """Index every text node under *root* in document order."""
    entries: list[IndexEntry] = []
    offset = 0
    for node in root.iter_text():
        entries.append(IndexEntry(node=node, start=offset, text=node.data))
        offset += len(node.data)
    return TextIndex(entries)


def map_range(index: TextIndex, start: int, end: int) -> TextRange | None:
    """Map flattened offsets ``[start, end)`` onto live text nodes.

    The start belongs to the entry with ``entry.start <= start < entry.end``;
    the end belongs to the entry with ``entry.start < end <= entry.end``, so
    an end exactly at a node's upper bound stays in that node.  Returns None
    when either endpoint cannot be located.
    """
    if start < 0 or end <= start:
        return None

    start_entry: IndexEntry | None = None
    for entry in index.entries:
        if start_entry is None and entry.start <= start < entry.end:
            start_entry = entry
        if start_entry is not None and entry.start < end <= entry.end:
            return TextRange(
                start_entry.node,
                start - start_entry.start,
                entry.node,
                end - entry.start,
            )
    return None


def find_occurrence(
    index: TextIndex, text: str, occurrence: int = 1
) -> TextRange | None:
    """Range of the *occurrence*-th (1-based) exact match of *text*."""
    if not text or occurrence < 1:
        return None
    found_at = -1
    for _ in range(occurrence):
        found_at = index.text.find(text, found_at + 1)
        if found_at == -1:
            return None
    return map_range(index, found_at, found_at + len(text))
