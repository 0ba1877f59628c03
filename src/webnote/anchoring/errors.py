"""Failure taxonomy for anchoring.

Every failure here is local to one highlight.  ``AddressUnresolvable`` and
``TextMismatch`` are recovered by the resolver's fallback tiers;
``SearchExhausted`` and ``RangeDegenerate`` are the only outcomes that
reach the controller, and only as a count or a failed create.
"""

from __future__ import annotations


class AnchoringError(Exception):
    """Base class for all anchoring failures."""


class AddressUnresolvable(AnchoringError):
    """A structural address no longer points at a node."""


class TextMismatch(AnchoringError):
    """An address resolved, but the text there is not the highlighted text."""

    def __init__(self, expected: str, actual: str) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(f"Expected {expected!r}, found {actual!r}")


class SearchExhausted(AnchoringError):
    """No restoration tier found the highlighted text."""


class RangeDegenerate(AnchoringError):
    """A selection cannot be captured (empty, or not bounded by text)."""


class MarkerApplyFailure(AnchoringError):
    """A marker could not enclose any text."""
