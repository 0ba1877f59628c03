"""Minimal mutable document tree used by the anchoring core.

The anchoring algorithms never talk to a parser or a browser directly.
They see this small node model: a ``Document`` root, ``Element`` nodes with
a lower-case tag, attributes and ordered children, and ``Text`` nodes
holding character data.  Every node knows its parent.

Each structural or character-data mutation bumps
``Document.mutation_count`` so callers can wait for a document to settle
before anchoring against it.
"""

# Pattern: Imperative Shell (small mutable tree, parent pointers)

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

# Elements whose content model forbids element children.
RAW_TEXT_TAGS = frozenset(("script", "style", "textarea", "title"))
VOID_TAGS = frozenset(
    (
        "area",
        "base",
        "br",
        "col",
        "embed",
        "hr",
        "img",
        "input",
        "link",
        "meta",
        "source",
        "track",
        "wbr",
    )
)


class TreeError(Exception):
    """Raised when a mutation would produce an invalid tree."""


class Node:
    """Base class for every node in the tree."""

    __slots__ = ("parent",)

    def __init__(self) -> None:
        self.parent: Element | None = None

    @property
    def root(self) -> Node:
        node: Node = self
        while node.parent is not None:
            node = node.parent
        return node

    @property
    def owner_document(self) -> Document | None:
        """The document this node is attached to, or None when detached."""
        root = self.root
        return root if isinstance(root, Document) else None

    @property
    def previous_sibling(self) -> Node | None:
        if self.parent is None:
            return None
        siblings = self.parent.children
        idx = siblings.index(self)
        return siblings[idx - 1] if idx > 0 else None

    @property
    def next_sibling(self) -> Node | None:
        if self.parent is None:
            return None
        siblings = self.parent.children
        idx = siblings.index(self)
        return siblings[idx + 1] if idx + 1 < len(siblings) else None

    @property
    def index(self) -> int:
        """Position of this node among its parent's children."""
        if self.parent is None:
            msg = "Detached node has no index"
            raise TreeError(msg)
        return self.parent.children.index(self)

    @property
    def text_content(self) -> str:
        raise NotImplementedError

    def is_ancestor_of(self, other: Node) -> bool:
        node = other.parent
        while node is not None:
            if node is self:
                return True
            node = node.parent
        return False

    def closest(self, predicate: Callable[[Element], bool]) -> Element | None:
        """Nearest inclusive ancestor element matching *predicate*."""
        node: Node | None = self
        while node is not None:
            if isinstance(node, Element) and predicate(node):
                return node
            node = node.parent
        return None

    def detach(self) -> None:
        if self.parent is not None:
            self.parent.remove_child(self)

    def _touch(self) -> None:
        doc = self.owner_document
        if doc is not None:
            doc.mutation_count += 1


class Text(Node):
    """A run of character data."""

    __slots__ = ("data",)

    def __init__(self, data: str = "") -> None:
        super().__init__()
        self.data = data

    def __repr__(self) -> str:
        return f"Text({self.data!r})"

    def __len__(self) -> int:
        return len(self.data)

    @property
    def text_content(self) -> str:
        return self.data

    def set_data(self, data: str) -> None:
        self.data = data
        self._touch()

    def split_text(self, offset: int) -> Text:
        """Split at *offset*; this node keeps the head, the tail is returned.

        The tail is inserted as the next sibling when the node is attached.
        """
        if not 0 <= offset <= len(self.data):
            msg = f"Offset {offset} outside text of length {len(self.data)}"
            raise IndexError(msg)
        tail = Text(self.data[offset:])
        self.data = self.data[:offset]
        if self.parent is not None:
            self.parent.insert_before(tail, self.next_sibling)
        else:
            self._touch()
        return tail


class Element(Node):
    """An element with a tag, attributes and ordered children."""

    __slots__ = ("attrs", "children", "tag")

    def __init__(
        self,
        tag: str,
        attrs: dict[str, str] | None = None,
        children: list[Node] | None = None,
    ) -> None:
        super().__init__()
        self.tag = tag.lower()
        self.attrs: dict[str, str] = dict(attrs or {})
        self.children: list[Node] = []
        for child in children or ():
            self.append_child(child)

    def __repr__(self) -> str:
        return f"Element({self.tag!r}, children={len(self.children)})"

    # --- Queries ---

    @property
    def element_children(self) -> list[Element]:
        return [c for c in self.children if isinstance(c, Element)]

    @property
    def first_child(self) -> Node | None:
        return self.children[0] if self.children else None

    @property
    def text_content(self) -> str:
        return "".join(t.data for t in self.iter_text())

    def iter_text(self) -> Iterator[Text]:
        """Depth-first iteration over descendant text nodes."""
        for child in self.children:
            if isinstance(child, Text):
                yield child
            elif isinstance(child, Element):
                yield from child.iter_text()

    def iter_elements(self) -> Iterator[Element]:
        """Depth-first iteration over descendant elements."""
        for child in self.children:
            if isinstance(child, Element):
                yield child
                yield from child.iter_elements()

    @property
    def classes(self) -> list[str]:
        return self.attrs.get("class", "").split()

    def set_classes(self, classes: list[str]) -> None:
        self.attrs["class"] = " ".join(classes)
        self._touch()

    # --- Mutation ---

    def _check_insertable(self, node: Node) -> None:
        if node is self or node.is_ancestor_of(self):
            msg = f"Cannot insert {node!r} into its own descendant {self!r}"
            raise TreeError(msg)
        if isinstance(node, Document):
            msg = "A document cannot be inserted into another node"
            raise TreeError(msg)
        if isinstance(node, Element) and (
            self.tag in RAW_TEXT_TAGS or self.tag in VOID_TAGS
        ):
            msg = f"<{self.tag}> does not accept element children"
            raise TreeError(msg)

    def accepts(self, node: Node) -> bool:
        """Whether *node* could be inserted here without a TreeError."""
        try:
            self._check_insertable(node)
        except TreeError:
            return False
        return True

    def insert_before(self, node: Node, reference: Node | None) -> Node:
        """Insert *node* before *reference* (append when reference is None)."""
        self._check_insertable(node)
        if reference is not None and reference.parent is not self:
            msg = f"{reference!r} is not a child of {self!r}"
            raise TreeError(msg)
        node.detach()
        if reference is None:
            self.children.append(node)
        else:
            self.children.insert(self.children.index(reference), node)
        node.parent = self
        self._touch()
        return node

    def append_child(self, node: Node) -> Node:
        return self.insert_before(node, None)

    def insert_at(self, index: int, node: Node) -> Node:
        reference = self.children[index] if index < len(self.children) else None
        return self.insert_before(node, reference)

    def remove_child(self, node: Node) -> Node:
        if node.parent is not self:
            msg = f"{node!r} is not a child of {self!r}"
            raise TreeError(msg)
        self._touch()
        self.children.remove(node)
        node.parent = None
        return node

    def replace_child(self, node: Node, old: Node) -> Node:
        """Put *node* where *old* is and detach *old*."""
        if old.parent is not self:
            msg = f"{old!r} is not a child of {self!r}"
            raise TreeError(msg)
        self._check_insertable(node)
        self.insert_before(node, old)
        self.remove_child(old)
        return old

    def normalize(self) -> None:
        """Merge adjacent text nodes and drop empty ones, recursively."""
        merged: list[Node] = []
        changed = False
        for child in self.children:
            if isinstance(child, Text):
                if not child.data:
                    child.parent = None
                    changed = True
                    continue
                if merged and isinstance(merged[-1], Text):
                    merged[-1].data += child.data
                    child.parent = None
                    changed = True
                    continue
            elif isinstance(child, Element):
                child.normalize()
            merged.append(child)
        if changed:
            self.children = merged
            self._touch()


class Document(Element):
    """Tree root.  Its single element child is the ``html`` element."""

    __slots__ = ("mutation_count", "ready_state")

    def __init__(self) -> None:
        self.mutation_count = 0
        self.ready_state = "loading"
        super().__init__("#document")

    def __repr__(self) -> str:
        return "Document()"

    @property
    def document_element(self) -> Element | None:
        for child in self.children:
            if isinstance(child, Element) and child.tag == "html":
                return child
        return None

    @property
    def body(self) -> Element | None:
        html = self.document_element
        if html is None:
            return None
        for child in html.children:
            if isinstance(child, Element) and child.tag == "body":
                return child
        return None


def tree_position(node: Node) -> tuple[int, ...]:
    """Child-index path from the root; sorts nodes in document order."""
    path: list[int] = []
    current = node
    while current.parent is not None:
        path.append(current.index)
        current = current.parent
    return tuple(reversed(path))
