"""Tests for parsing markup into the tree and writing it back."""

from __future__ import annotations

from webnote.dom.html import inner_html, parse_html, serialize
from webnote.dom.tree import Element, Text


class TestParseHtml:
    """parse_html builds a complete document."""

    def test_structure(self) -> None:
        document = parse_html("<html><body><p>Hello <b>world</b></p></body></html>")
        assert document.document_element is not None
        assert document.body is not None
        p = document.body.element_children[0]
        assert p.tag == "p"
        assert p.text_content == "Hello world"

    def test_fragment_gets_body(self) -> None:
        document = parse_html("<p>loose</p>")
        assert document.body is not None
        assert document.body.text_content == "loose"

    def test_empty_markup_still_has_body(self) -> None:
        assert parse_html("").body is not None

    def test_comments_dropped(self) -> None:
        document = parse_html("<body><p>a<!-- hidden -->b</p></body>")
        assert document.body is not None
        assert document.body.text_content == "ab"

    def test_text_kept_verbatim(self) -> None:
        document = parse_html("<body><p>  spaced\n  out  </p></body>")
        assert document.body is not None
        assert document.body.text_content == "  spaced\n  out  "

    def test_attributes_and_entities(self) -> None:
        document = parse_html('<body><a href="/x?a=1&amp;b=2">&lt;tag&gt;</a></body>')
        assert document.body is not None
        link = document.body.element_children[0]
        assert link.attrs["href"] == "/x?a=1&b=2"
        assert link.text_content == "<tag>"

    def test_parsing_is_not_a_mutation(self) -> None:
        document = parse_html("<body><p>a</p><p>b</p></body>")
        assert document.mutation_count == 0
        assert document.ready_state == "complete"


class TestSerialize:
    """serialize and inner_html."""

    def test_escapes_text_and_attributes(self) -> None:
        el = Element("span", {"title": 'say "hi"'}, [Text("a < b & c")])
        assert serialize(el) == (
            '<span title="say &quot;hi&quot;">a &lt; b &amp; c</span>'
        )

    def test_script_text_not_escaped(self) -> None:
        el = Element("script", children=[Text("if (a < b) {}")])
        assert serialize(el) == "<script>if (a < b) {}</script>"

    def test_void_elements_have_no_end_tag(self) -> None:
        el = Element("p", children=[Text("a"), Element("br"), Text("b")])
        assert serialize(el) == "<p>a<br>b</p>"

    def test_document_has_doctype(self) -> None:
        assert serialize(parse_html("<p>x</p>")).startswith("<!DOCTYPE html><html>")

    def test_inner_html(self) -> None:
        el = Element("div", children=[Element("p", children=[Text("x")])])
        assert inner_html(el) == "<p>x</p>"

    def test_round_trip_through_parser(self) -> None:
        markup = "<p>One <em>two</em> three</p><ul><li>a</li><li>b</li></ul>"
        document = parse_html(f"<html><head></head><body>{markup}</body></html>")
        assert document.body is not None
        assert inner_html(document.body) == markup
