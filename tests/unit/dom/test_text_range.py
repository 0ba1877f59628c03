"""Tests for TextRange boundary handling and mutation."""

from __future__ import annotations

import pytest

from webnote.dom.range import TextRange
from webnote.dom.tree import Element, Text, TreeError


def _paragraph() -> tuple[Element, Text, Text, Text]:
    """<p>Some <b>bold</b> text</p>"""
    head, bold, tail = Text("Some "), Text("bold"), Text(" text")
    p = Element("p", children=[head, Element("b", children=[bold]), tail])
    Element("body", children=[p])
    return p, head, bold, tail


class TestTextRangeQueries:
    """Reading text and slices from a range."""

    def test_offsets_validated(self) -> None:
        with pytest.raises(IndexError):
            TextRange(Text("abc"), 0, Text("abc"), 4)

    def test_single_node_text(self) -> None:
        _, head, _, _ = _paragraph()
        assert TextRange(head, 1, head, 4).text() == "ome"

    def test_cross_node_slices(self) -> None:
        _, head, bold, tail = _paragraph()
        found = TextRange(head, 2, tail, 3)
        assert found.text_nodes() == [(head, 2, 5), (bold, 0, 4), (tail, 0, 3)]
        assert found.text() == "me bold te"

    def test_empty_slices_dropped(self) -> None:
        _, head, bold, _ = _paragraph()
        found = TextRange(head, 5, bold, 2)
        assert found.text_nodes() == [(bold, 0, 2)]

    def test_collapsed_range_has_no_text(self) -> None:
        _, head, _, _ = _paragraph()
        found = TextRange(head, 2, head, 2)
        assert found.collapsed
        assert found.text() == ""

    def test_element_boundaries_resolve_to_text(self) -> None:
        p, _, _, _ = _paragraph()
        assert TextRange(p, 0, p, 3).text() == "Some bold text"

    def test_reversed_range_is_not_ordered(self) -> None:
        _, head, _, tail = _paragraph()
        assert TextRange(head, 0, tail, 2).is_ordered()
        assert not TextRange(tail, 2, head, 0).is_ordered()
        assert TextRange(tail, 2, head, 0).text_nodes() == []


class TestTextRangeMutation:
    """surround_contents, extract_contents and insert_node."""

    def test_surround_contents_splits_and_wraps(self) -> None:
        p, head, _, _ = _paragraph()
        mark = Element("mark")
        TextRange(head, 1, head, 3).surround_contents(mark)
        assert [type(c).__name__ for c in p.children[:3]] == ["Text", "Element", "Text"]
        assert head.data == "S"
        assert mark.text_content == "om"
        assert p.text_content == "Some bold text"

    def test_surround_rejects_multi_node_range(self) -> None:
        _, head, _, tail = _paragraph()
        with pytest.raises(TreeError):
            TextRange(head, 0, tail, 1).surround_contents(Element("mark"))

    def test_surround_inside_raw_text_rejected(self) -> None:
        code = Text("var x = 1;")
        Element("body", children=[Element("script", children=[code])])
        with pytest.raises(TreeError):
            TextRange(code, 0, code, 3).surround_contents(Element("mark"))

    def test_extract_then_insert_restores_text(self) -> None:
        p, head, _, _ = _paragraph()
        found = TextRange(head, 0, head, 4)
        extracted = found.extract_contents()
        assert [n.text_content for n in extracted] == ["Some"]
        assert found.collapsed
        found.insert_node(extracted[0])
        assert p.text_content == "Some bold text"

    def test_detached_text_raises_tree_error(self) -> None:
        loose = Text("loose text")
        with pytest.raises(TreeError):
            TextRange(loose, 0, loose, 5).surround_contents(Element("mark"))
        with pytest.raises(TreeError):
            TextRange(loose, 0, loose, 5).extract_contents()
