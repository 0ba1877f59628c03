"""HTML loading and serialisation for the document tree.

Parsing goes through selectolax's Lexbor backend, walking the parsed
DOM via ``child``/``next`` iteration (which exposes text nodes) and copying
it into the mutable ``webnote.dom.tree`` model.  Text is kept verbatim:
no whitespace collapsing happens here, so character offsets stay aligned
with what a browser's text nodes would contain.
"""

# Pattern: Functional Core (pure conversion between markup and tree)

from __future__ import annotations

import html as html_module
import logging
from typing import Any

from selectolax.lexbor import LexborHTMLParser

from webnote.dom.tree import VOID_TAGS, Document, Element, Node, Text

logger = logging.getLogger(__name__)

# Raw-text elements whose content is written back without escaping
_UNESCAPED_TAGS = frozenset(("script", "style"))


def _adopt(target: Element, node: Node) -> None:
    # Bulk load: bypasses insert_before so parsing is not counted as mutation.
    node.parent = target
    target.children.append(node)


def _copy_attrs(source: Any) -> dict[str, str]:
    return {k: v if v is not None else "" for k, v in source.attributes.items()}


def _copy_children(source: Any, target: Element) -> None:
    child = source.child
    while child is not None:
        tag = child.tag
        if tag == "-text":
            text = child.text_content
            if text:
                _adopt(target, Text(text))
        elif tag and not tag.startswith(("-", "_", "!")):
            element = Element(tag, _copy_attrs(child))
            _adopt(target, element)
            _copy_children(child, element)
        child = child.next


def parse_html(markup: str) -> Document:
    """Parse *markup* into a ``Document`` with ``html``/``head``/``body``.

    Comments and the doctype are dropped.  The returned document reports
    ``ready_state == "complete"``.
    """
    tree = LexborHTMLParser(markup or "")
    document = Document()
    root = tree.root
    html = Element("html")
    _adopt(document, html)
    if root is not None:
        html.attrs.update(_copy_attrs(root))
        _copy_children(root, html)
    if document.body is None:
        _adopt(html, Element("body"))
    document.ready_state = "complete"
    logger.debug(
        "Parsed %d bytes into %d text nodes",
        len(markup or ""),
        sum(1 for _ in document.iter_text()),
    )
    return document


def _serialize_attrs(attrs: dict[str, str]) -> str:
    return "".join(
        f' {name}="{html_module.escape(value, quote=True)}"'
        for name, value in attrs.items()
    )


def _serialize_into(node: Node, out: list[str]) -> None:
    if isinstance(node, Text):
        parent = node.parent
        if parent is not None and parent.tag in _UNESCAPED_TAGS:
            out.append(node.data)
        else:
            out.append(html_module.escape(node.data, quote=False))
        return
    if not isinstance(node, Element):
        msg = f"Cannot serialise {node!r}"
        raise TypeError(msg)
    if isinstance(node, Document):
        out.append("<!DOCTYPE html>")
        for child in node.children:
            _serialize_into(child, out)
        return
    out.append(f"<{node.tag}{_serialize_attrs(node.attrs)}>")
    if node.tag in VOID_TAGS:
        return
    for child in node.children:
        _serialize_into(child, out)
    out.append(f"</{node.tag}>")


def serialize(node: Node) -> str:
    """Serialise *node* (outer HTML; a document gets a doctype)."""
    out: list[str] = []
    _serialize_into(node, out)
    return "".join(out)


def inner_html(element: Element) -> str:
    """Serialise the children of *element*."""
    out: list[str] = []
    for child in element.children:
        _serialize_into(child, out)
    return "".join(out)
