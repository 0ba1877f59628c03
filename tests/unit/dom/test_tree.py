"""Tests for the mutable document tree."""

from __future__ import annotations

import pytest

from webnote.dom.tree import Document, Element, Text, TreeError, tree_position


def _doc(*body_children) -> Document:
    document = Document()
    body = Element("body", children=list(body_children))
    document.append_child(Element("html", children=[Element("head"), body]))
    return document


class TestStructure:
    """Parent links, siblings and document accessors."""

    def test_children_know_their_parent(self) -> None:
        text = Text("hi")
        p = Element("p", children=[text])
        assert text.parent is p
        assert p.first_child is text

    def test_siblings_and_index(self) -> None:
        a, b, c = Text("a"), Element("br"), Text("c")
        p = Element("p", children=[a, b, c])
        assert b.previous_sibling is a
        assert b.next_sibling is c
        assert a.previous_sibling is None
        assert c.next_sibling is None
        assert c.index == 2
        assert p.element_children == [b]

    def test_detached_node_has_no_index(self) -> None:
        with pytest.raises(TreeError):
            _ = Text("x").index

    def test_document_body_and_owner(self) -> None:
        text = Text("x")
        document = _doc(Element("p", children=[text]))
        assert document.body is not None
        assert document.body.tag == "body"
        assert text.owner_document is document
        assert Text("loose").owner_document is None

    def test_tags_are_lower_case(self) -> None:
        assert Element("DIV").tag == "div"

    def test_text_content_concatenates_descendants(self) -> None:
        p = Element("p", children=[Text("a"), Element("b", children=[Text("b")])])
        assert p.text_content == "ab"

    def test_closest_includes_self(self) -> None:
        inner = Text("x")
        span = Element("span", {"class": "hit"}, [inner])
        Element("div", {"class": "hit"}, [span])
        assert inner.closest(lambda e: "hit" in e.classes) is span
        assert span.closest(lambda e: e.tag == "div") is span.parent

    def test_tree_position_orders_nodes(self) -> None:
        first, second = Text("1"), Text("2")
        _doc(Element("p", children=[first]), Element("p", children=[second]))
        assert tree_position(first) < tree_position(second)


class TestMutation:
    """Insertion, removal, splitting and normalisation."""

    def test_insert_moves_node_from_old_parent(self) -> None:
        text = Text("x")
        old = Element("p", children=[text])
        new = Element("p")
        new.append_child(text)
        assert old.children == []
        assert text.parent is new

    def test_insert_into_own_descendant_rejected(self) -> None:
        inner = Element("span")
        outer = Element("div", children=[inner])
        with pytest.raises(TreeError):
            inner.append_child(outer)

    def test_element_into_raw_text_rejected(self) -> None:
        script = Element("script", children=[Text("var x;")])
        with pytest.raises(TreeError):
            script.append_child(Element("mark"))

    def test_element_into_void_rejected(self) -> None:
        with pytest.raises(TreeError):
            Element("img").append_child(Element("mark"))

    def test_reference_must_be_a_child(self) -> None:
        with pytest.raises(TreeError):
            Element("p").insert_before(Text("a"), Text("b"))

    def test_replace_child(self) -> None:
        old = Text("old")
        p = Element("p", children=[Text("a"), old, Text("b")])
        new = Element("mark")
        p.replace_child(new, old)
        assert p.children[1] is new
        assert old.parent is None

    def test_split_text_inserts_tail_after(self) -> None:
        text = Text("Hello world")
        p = Element("p", children=[text])
        tail = text.split_text(5)
        assert text.data == "Hello"
        assert tail.data == " world"
        assert p.children == [text, tail]

    def test_split_text_rejects_bad_offset(self) -> None:
        with pytest.raises(IndexError):
            Text("abc").split_text(4)

    def test_normalize_merges_and_drops_empty(self) -> None:
        inner = Element("b", children=[Text("x"), Text(""), Text("y")])
        p = Element("p", children=[Text("a"), Text("b"), inner, Text("")])
        p.normalize()
        assert [c.data for c in p.children if isinstance(c, Text)] == ["ab"]
        assert len(inner.children) == 1
        assert inner.text_content == "xy"

    def test_mutations_bump_document_counter(self) -> None:
        text = Text("abc")
        document = _doc(Element("p", children=[text]))
        before = document.mutation_count
        text.split_text(1)
        text.set_data("A")
        assert document.mutation_count >= before + 2

    def test_detached_mutations_not_counted(self) -> None:
        document = _doc()
        before = document.mutation_count
        Element("p").append_child(Text("x"))
        assert document.mutation_count == before

    def test_new_document_is_loading(self) -> None:
        assert Document().ready_state == "loading"
