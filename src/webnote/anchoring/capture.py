"""Capture a live selection as a serialisable span descriptor."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from webnote.anchoring.errors import RangeDegenerate
from webnote.anchoring.path import address_of
from webnote.dom.tree import Text
from webnote.models import SpanDescriptor

if TYPE_CHECKING:
    from webnote.dom.range import TextRange

logger = logging.getLogger(__name__)

CONTEXT_LENGTH = 30


def capture(
    text_range: TextRange, context_length: int = CONTEXT_LENGTH
) -> SpanDescriptor:
    """Describe *text_range* by address pair, offsets and surrounding text.

    Context is read from the boundary text nodes only and never crosses a
    node boundary, so short text nodes give less than *context_length*
    characters.

    Raises:
        RangeDegenerate: The range is collapsed, a boundary is not a text
            node, or a boundary node is detached from the document.
    """
    start, end = text_range.start_container, text_range.end_container
    if not isinstance(start, Text) or not isinstance(end, Text):
        msg = "Selection boundaries must be text nodes"
        raise RangeDegenerate(msg)
    if text_range.collapsed or not text_range.text():
        msg = "Selection is empty"
        raise RangeDegenerate(msg)

    start_address = address_of(start)
    end_address = address_of(end)
    if not start_address or not end_address:
        msg = "Selection is not attached to a document"
        raise RangeDegenerate(msg)

    start_offset, end_offset = text_range.start_offset, text_range.end_offset
    before = start.data[max(0, start_offset - context_length) : start_offset]
    after = end.data[end_offset : end_offset + context_length]

    descriptor = SpanDescriptor(
        start_address=start_address,
        start_offset=start_offset,
        end_address=end_address,
        end_offset=end_offset,
        context_before=before,
        context_after=after,
    )
    logger.debug(
        "Captured %s:%d -> %s:%d", start_address, start_offset, end_address, end_offset
    )
    return descriptor
