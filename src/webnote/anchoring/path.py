"""Structural addresses for tree nodes.

An address is a sequence of ``(tag, index)`` steps from the document to a
node, rendered as an XPath-like string::

    /html/body/div[2]/p[1]/text()[3]

Element steps count siblings sharing the same tag under the same parent;
the terminal ``text()`` step counts sibling text nodes.  Indices are
1-based.  ``html`` and ``body`` are fixed roots and render without an
index.

Addresses are plain values.  They carry no reference to a live node, so
any insertion or removal of a same-tag sibling before the target makes
them point somewhere else (or nowhere).
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING

from webnote.dom.tree import Document, Element, Text

if TYPE_CHECKING:
    from webnote.dom.tree import Node

logger = logging.getLogger(__name__)

TEXT_STEP = "text()"

_STEP_PATTERN = re.compile(r"^(text\(\)|[^/\[\]\s]+)(?:\[(\d+)\])?$")


@dataclass(frozen=True)
class PathStep:
    """One step of an address: a tag (or ``text()``) and a 1-based rank."""

    tag: str
    index: int = 1

    @property
    def is_text(self) -> bool:
        return self.tag == TEXT_STEP


_HTML_STEP = PathStep("html")
_BODY_STEP = PathStep("body")


@dataclass(frozen=True)
class PathAddress:
    """Immutable address of a node; the empty address means "cannot address"."""

    steps: tuple[PathStep, ...] = ()

    def __bool__(self) -> bool:
        return bool(self.steps)

    def __str__(self) -> str:
        parts: list[str] = []
        for position, step in enumerate(self.steps):
            fixed_root = (position, step) in ((0, _HTML_STEP), (1, _BODY_STEP))
            parts.append(step.tag if fixed_root else f"{step.tag}[{step.index}]")
        return "".join(f"/{part}" for part in parts)

    @property
    def targets_text(self) -> bool:
        return bool(self.steps) and self.steps[-1].is_text

    def child(self, step: PathStep) -> PathAddress:
        return PathAddress((*self.steps, step))

    @classmethod
    def parse(cls, value: str) -> PathAddress:
        """Parse the string form.  The empty string is the empty address.

        Raises:
            ValueError: If *value* is not a well-formed address.
        """
        if not value:
            return cls()
        if not value.startswith("/"):
            msg = f"Address must start with '/': {value!r}"
            raise ValueError(msg)
        steps: list[PathStep] = []
        segments = value[1:].split("/")
        for position, segment in enumerate(segments):
            match = _STEP_PATTERN.match(segment)
            if match is None:
                msg = f"Malformed address step {segment!r} in {value!r}"
                raise ValueError(msg)
            tag, index = match.group(1), int(match.group(2) or 1)
            if index < 1:
                msg = f"Address indices are 1-based: {value!r}"
                raise ValueError(msg)
            if tag == TEXT_STEP and position != len(segments) - 1:
                msg = f"text() must be the last step: {value!r}"
                raise ValueError(msg)
            steps.append(PathStep(tag, index))
        return cls(tuple(steps))


def _element_address(element: Element) -> PathAddress:
    document = element.owner_document
    if document is None:
        return PathAddress()
    if element is document.body:
        return PathAddress((_HTML_STEP, _BODY_STEP))
    if element is document.document_element:
        return PathAddress((_HTML_STEP,))
    parent = element.parent
    if parent is None or isinstance(parent, Document):
        return PathAddress()
    parent_address = _element_address(parent)
    if not parent_address:
        return parent_address
    same_tag = [e for e in parent.element_children if e.tag == element.tag]
    rank = next(i for i, e in enumerate(same_tag, start=1) if e is element)
    return parent_address.child(PathStep(element.tag, rank))


def address_of(node: Node) -> PathAddress:
    """Compute the structural address of *node*.

    Returns the empty address for detached nodes and for nodes that do not
    sit under the document element; callers treat that as "cannot address".
    """
    if isinstance(node, Text):
        parent = node.parent
        if parent is None or isinstance(parent, Document):
            return PathAddress()
        parent_address = _element_address(parent)
        if not parent_address:
            return parent_address
        texts = [c for c in parent.children if isinstance(c, Text)]
        rank = next(i for i, t in enumerate(texts, start=1) if t is node)
        return parent_address.child(PathStep(TEXT_STEP, rank))
    if isinstance(node, Element) and not isinstance(node, Document):
        return _element_address(node)
    return PathAddress()


def resolve(document: Document, address: PathAddress) -> Node | None:
    """Walk *address* from *document*; None when any step is out of range."""
    if not address:
        return None
    current: Node = document
    for step in address.steps:
        if not isinstance(current, Element):
            return None
        if step.is_text:
            candidates: list[Node] = [
                c for c in current.children if isinstance(c, Text)
            ]
        else:
            candidates = [c for c in current.element_children if c.tag == step.tag]
        if step.index > len(candidates):
            logger.debug("Address %s: step %s out of range", address, step)
            return None
        current = candidates[step.index - 1]
    return current
