"""Text ranges over the document tree.

A ``TextRange`` is a pair of boundary points, each a container node plus
an offset.  For a text container the offset counts characters; for an
element it counts children, as in the DOM Range model.
"""

from __future__ import annotations

from dataclasses import dataclass

from webnote.dom.tree import Element, Node, Text, TreeError, tree_position


def _check_offset(container: Node, offset: int) -> None:
    limit = len(container.data) if isinstance(container, Text) else None
    if isinstance(container, Element):
        limit = len(container.children)
    if limit is None or not 0 <= offset <= limit:
        msg = f"Offset {offset} is not a valid boundary in {container!r}"
        raise IndexError(msg)


def _first_text_from(element: Element, index: int) -> Text | None:
    for child in element.children[index:]:
        if isinstance(child, Text):
            return child
        if isinstance(child, Element):
            found = next(child.iter_text(), None)
            if found is not None:
                return found
    return None


def _last_text_before(element: Element, index: int) -> Text | None:
    for child in reversed(element.children[:index]):
        if isinstance(child, Text):
            return child
        if isinstance(child, Element):
            texts = list(child.iter_text())
            if texts:
                return texts[-1]
    return None


@dataclass
class TextRange:
    """A contiguous span between two boundary points."""

    start_container: Node
    start_offset: int
    end_container: Node
    end_offset: int

    def __post_init__(self) -> None:
        _check_offset(self.start_container, self.start_offset)
        _check_offset(self.end_container, self.end_offset)

    @property
    def collapsed(self) -> bool:
        return (
            self.start_container is self.end_container
            and self.start_offset == self.end_offset
        )

    @property
    def common_ancestor(self) -> Node:
        ancestors: list[Node] = []
        node: Node | None = self.start_container
        while node is not None:
            ancestors.append(node)
            node = node.parent
        node = self.end_container
        while node is not None:
            if any(node is a for a in ancestors):
                return node
            node = node.parent
        msg = "Range boundaries are in different trees"
        raise TreeError(msg)

    # --- Boundary normalisation ---

    def _text_start(self) -> tuple[Text, int] | None:
        container = self.start_container
        if isinstance(container, Text):
            return container, self.start_offset
        if isinstance(container, Element):
            found = _first_text_from(container, self.start_offset)
            if found is not None:
                return found, 0
        return None

    def _text_end(self) -> tuple[Text, int] | None:
        container = self.end_container
        if isinstance(container, Text):
            return container, self.end_offset
        if isinstance(container, Element):
            found = _last_text_before(container, self.end_offset)
            if found is not None:
                return found, len(found.data)
        return None

    def is_ordered(self) -> bool:
        """True when the start boundary does not come after the end boundary."""
        start = self._text_start()
        end = self._text_end()
        if start is None or end is None:
            return self.collapsed
        start_key = (tree_position(start[0]), start[1])
        end_key = (tree_position(end[0]), end[1])
        return start_key <= end_key

    # --- Content ---

    def text_nodes(self) -> list[tuple[Text, int, int]]:
        """Text nodes intersecting the range as ``(node, start, end)`` slices.

        Empty slices are dropped, so a collapsed range yields nothing.
        """
        start = self._text_start()
        end = self._text_end()
        if start is None or end is None:
            return []
        start_node, start_offset = start
        end_node, end_offset = end

        if start_node is end_node:
            if end_offset > start_offset:
                return [(start_node, start_offset, end_offset)]
            return []

        ancestor = self.common_ancestor
        if isinstance(ancestor, Text):
            return []

        slices: list[tuple[Text, int, int]] = []
        inside = False
        for node in ancestor.iter_text():  # type: ignore[attr-defined]
            if node is start_node:
                inside = True
                node_start, node_end = start_offset, len(node.data)
            elif node is end_node:
                if not inside:
                    return []
                node_start, node_end = 0, end_offset
            elif inside:
                node_start, node_end = 0, len(node.data)
            else:
                continue
            if node_end > node_start:
                slices.append((node, node_start, node_end))
            if node is end_node:
                break
        return slices

    def text(self) -> str:
        """The string the range selects."""
        return "".join(node.data[s:e] for node, s, e in self.text_nodes())

    # --- Mutation ---

    def _isolate(self) -> Text:
        """Split the single text container so the range covers a whole node."""
        container = self.start_container
        if container is not self.end_container or not isinstance(container, Text):
            msg = "Range partially selects a non-text node"
            raise TreeError(msg)
        if container.parent is None:
            msg = "Cannot isolate text in a detached node"
            raise TreeError(msg)
        if self.end_offset < len(container.data):
            container.split_text(self.end_offset)
        middle = container
        if self.start_offset > 0:
            middle = container.split_text(self.start_offset)
        self.start_container = self.end_container = middle
        self.start_offset, self.end_offset = 0, len(middle.data)
        return middle

    def surround_contents(self, wrapper: Element) -> None:
        """Move the selected text into *wrapper* and put wrapper in its place."""
        middle = self._isolate()
        parent = middle.parent
        if parent is None:
            msg = "Isolated text lost its parent"
            raise TreeError(msg)
        parent.replace_child(wrapper, middle)
        wrapper.append_child(middle)
        self.start_container = self.end_container = wrapper
        self.start_offset, self.end_offset = 0, len(wrapper.children)

    def extract_contents(self) -> list[Node]:
        """Detach the selected text; the range collapses where it was."""
        middle = self._isolate()
        parent = middle.parent
        if parent is None:
            msg = "Isolated text lost its parent"
            raise TreeError(msg)
        index = middle.index
        parent.remove_child(middle)
        self.start_container = self.end_container = parent
        self.start_offset = self.end_offset = index
        return [middle]

    def insert_node(self, node: Node) -> None:
        """Insert *node* at the start boundary."""
        container = self.start_container
        if isinstance(container, Text):
            parent = container.parent
            if parent is None:
                msg = "Cannot insert next to a detached text node"
                raise TreeError(msg)
            if self.start_offset == 0:
                parent.insert_before(node, container)
            else:
                tail = container.split_text(self.start_offset)
                parent.insert_before(node, tail)
        elif isinstance(container, Element):
            container.insert_at(self.start_offset, node)
        else:
            msg = f"Cannot insert into {container!r}"
            raise TreeError(msg)
