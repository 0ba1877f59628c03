"""Marker elements: materialise, recolour and remove highlights in the tree.

A highlight is shown by wrapping each enclosed text slice in::

    <mark class="webnote-highlight webnote-<color>" data-highlight-id="<id>">

A span crossing inline structure produces several markers for one id.
``LiveMarkerSet`` is the table of which markers belong to which id; it is
owned by one controller for one document instance and never persisted.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from webnote.anchoring.errors import MarkerApplyFailure
from webnote.dom.range import TextRange
from webnote.dom.tree import Element, TreeError

if TYPE_CHECKING:
    from collections.abc import Iterator

    from webnote.dom.tree import Node

logger = logging.getLogger(__name__)

MARKER_TAG = "mark"
MARKER_CLASS = "webnote-highlight"
HIGHLIGHT_ID_ATTR = "data-highlight-id"


def color_class(color: str) -> str:
    return f"webnote-{color}"


def marker_classes(color: str) -> list[str]:
    return [MARKER_CLASS, color_class(color)]


def is_marker(element: Element) -> bool:
    return element.tag == MARKER_TAG and MARKER_CLASS in element.classes


class LiveMarkerSet:
    """Highlight id -> ordered marker elements currently in the document."""

    def __init__(self) -> None:
        self._markers: dict[str, list[Element]] = {}

    def __contains__(self, highlight_id: object) -> bool:
        return highlight_id in self._markers

    def __len__(self) -> int:
        return len(self._markers)

    def __iter__(self) -> Iterator[str]:
        return iter(self._markers)

    def get(self, highlight_id: str) -> list[Element]:
        return list(self._markers.get(highlight_id, ()))

    def register(self, highlight_id: str, markers: list[Element]) -> None:
        self._markers[highlight_id] = list(markers)

    def forget(self, highlight_id: str) -> list[Element]:
        return self._markers.pop(highlight_id, [])


class MarkerApplier:
    """Wraps, recolours and unwraps markers, keeping ``markers`` in sync."""

    def __init__(self, markers: LiveMarkerSet | None = None) -> None:
        self.markers = markers if markers is not None else LiveMarkerSet()

    def apply(
        self, text_range: TextRange, color: str, highlight_id: str
    ) -> list[Element]:
        """Wrap every text slice of *text_range* in a marker for *highlight_id*.

        Returns the markers in document order.

        Raises:
            MarkerApplyFailure: The range encloses no text, or a slice could
                not be wrapped.  Markers created before the failure are
                removed again, so nothing is partially applied.
        """
        slices = text_range.text_nodes()
        if not slices:
            msg = f"Highlight {highlight_id} encloses no text"
            raise MarkerApplyFailure(msg)

        # Collect all slices before splitting; splits invalidate offsets.
        wrappers = [
            Element(
                MARKER_TAG,
                {
                    "class": " ".join(marker_classes(color)),
                    HIGHLIGHT_ID_ATTR: highlight_id,
                },
            )
            for _ in slices
        ]
        for (node, _, _), wrapper in zip(slices, wrappers, strict=True):
            parent = node.parent
            if parent is None or not parent.accepts(wrapper):
                msg = f"Highlight {highlight_id} covers text that cannot hold a marker"
                raise MarkerApplyFailure(msg)

        applied: list[Element] = []
        try:
            for (node, start, end), wrapper in zip(slices, wrappers, strict=True):
                parent = node.parent
                try:
                    self._wrap(TextRange(node, start, node, end), wrapper)
                except TreeError:
                    if parent is not None:
                        parent.normalize()
                    raise
                applied.append(wrapper)
        except TreeError as exc:
            self._unwrap_all(applied)
            msg = f"Highlight {highlight_id} could not be wrapped: {exc}"
            raise MarkerApplyFailure(msg) from exc

        self.markers.register(highlight_id, applied)
        logger.debug("Applied %d marker(s) for %s", len(applied), highlight_id)
        return applied

    @staticmethod
    def _wrap(node_range: TextRange, wrapper: Element) -> None:
        try:
            node_range.surround_contents(wrapper)
        except TreeError:
            # For ranges whose surround_contents refuses: extract the text,
            # fill the wrapper and insert it at the collapsed boundary.
            logger.debug("surround_contents failed; extracting and reinserting")
            extracted = node_range.extract_contents()
            for node in extracted:
                wrapper.append_child(node)
            try:
                node_range.insert_node(wrapper)
            except TreeError:
                # Put the text back where it was before giving up.
                for node in reversed(extracted):
                    node_range.insert_node(node)
                raise

    @staticmethod
    def _unwrap_all(wrappers: list[Element]) -> None:
        for wrapper in wrappers:
            parent = wrapper.parent
            if parent is None:
                continue
            for child in list(wrapper.children):
                parent.insert_before(child, wrapper)
            parent.remove_child(wrapper)
            parent.normalize()

    def remove(self, highlight_id: str) -> bool:
        """Replace each marker of *highlight_id* by its children; False if unknown."""
        if highlight_id not in self.markers:
            return False
        self._unwrap_all(self.markers.forget(highlight_id))
        logger.debug("Removed markers for %s", highlight_id)
        return True

    def recolor(self, highlight_id: str, color: str) -> bool:
        """Swap the colour class on every marker of *highlight_id*."""
        if highlight_id not in self.markers:
            return False
        for wrapper in self.markers.get(highlight_id):
            wrapper.set_classes(marker_classes(color))
        return True


def highlight_id_at(node: Node) -> str | None:
    """Id of the closest marker enclosing *node*, if any."""
    marker = node.closest(is_marker)
    return marker.attrs.get(HIGHLIGHT_ID_ATTR) if marker is not None else None
