"""Document tree, text ranges and HTML I/O used by the anchoring core."""

from webnote.dom.html import inner_html, parse_html, serialize
from webnote.dom.range import TextRange
from webnote.dom.tree import Document, Element, Node, Text, TreeError

__all__ = [
    "Document",
    "Element",
    "Node",
    "Text",
    "TextRange",
    "TreeError",
    "inner_html",
    "parse_html",
    "serialize",
]
