"""Tests for structural addresses."""

from __future__ import annotations

import pytest

from tests.conftest import page
from webnote.anchoring.path import PathAddress, PathStep, address_of, resolve
from webnote.dom.tree import Element, Text


class TestAddressString:
    """String form and parsing."""

    def test_html_and_body_render_without_index(self) -> None:
        address = PathAddress(
            (
                PathStep("html"),
                PathStep("body"),
                PathStep("p", 2),
                PathStep("text()", 1),
            )
        )
        assert str(address) == "/html/body/p[2]/text()[1]"

    def test_parse_round_trips(self) -> None:
        text = "/html/body/div[2]/p[1]/text()[3]"
        assert str(PathAddress.parse(text)) == text

    def test_namespaced_tag_round_trips(self) -> None:
        text = "/html/body/o:p[1]/text()[1]"
        address = PathAddress.parse(text)
        assert address.steps[-2] == PathStep("o:p", 1)
        assert str(address) == text

    def test_missing_index_means_first(self) -> None:
        address = PathAddress.parse("/html/body/p/text()")
        assert address.steps[-2] == PathStep("p", 1)
        assert address.targets_text

    def test_empty_string_is_empty_address(self) -> None:
        assert not PathAddress.parse("")

    @pytest.mark.parametrize(
        "value",
        ["html/body", "/html/body/p[0]", "/html/text()[1]/b", "/html/bo dy"],
    )
    def test_malformed_rejected(self, value: str) -> None:
        with pytest.raises(ValueError):
            PathAddress.parse(value)


class TestAddressOf:
    """Computing addresses for live nodes."""

    def test_text_node_address(self) -> None:
        document = page("<p>alpha</p><p>beta <b>bold</b> tail</p>")
        assert document.body is not None
        second = document.body.element_children[1]
        tail = second.children[-1]
        assert isinstance(tail, Text)
        assert str(address_of(tail)) == "/html/body/p[2]/text()[2]"

    def test_counts_same_tag_siblings_only(self) -> None:
        document = page("<div>x</div><p>one</p><div>y</div><p>two</p>")
        assert document.body is not None
        p_two = document.body.element_children[3]
        assert str(address_of(p_two)) == "/html/body/p[2]"

    def test_body_and_html(self) -> None:
        document = page("<p>x</p>")
        assert document.body is not None
        assert str(address_of(document.body)) == "/html/body"
        assert document.document_element is not None
        assert str(address_of(document.document_element)) == "/html"

    def test_detached_node_has_empty_address(self) -> None:
        assert not address_of(Text("loose"))
        assert not address_of(Element("p", children=[Text("x")]).children[0])

    def test_document_has_empty_address(self) -> None:
        assert not address_of(page("<p>x</p>"))


class TestResolve:
    """Walking addresses back to nodes."""

    def test_address_then_resolve_is_identity(self) -> None:
        document = page("<div><p>a</p><p>b <i>c</i> d</p></div><p>e</p>")
        for node in document.iter_text():
            address = address_of(node)
            if address:
                assert resolve(document, address) is node
        for element in document.iter_elements():
            address = address_of(element)
            if address:
                assert resolve(document, address) is element

    def test_prefixed_tag_survives_string_form(self) -> None:
        document = page("<p>keep</p><o:p>office</o:p>")
        for node in document.iter_text():
            address = address_of(node)
            if address:
                assert resolve(document, PathAddress.parse(str(address))) is node

    def test_out_of_range_step(self) -> None:
        document = page("<p>only</p>")
        assert resolve(document, PathAddress.parse("/html/body/p[2]/text()[1]")) is None
        assert resolve(document, PathAddress.parse("/html/body/p[1]/text()[2]")) is None

    def test_empty_address(self) -> None:
        assert resolve(page("<p>x</p>"), PathAddress()) is None

    def test_same_tag_insertion_shifts_target(self) -> None:
        document = page("<p>alpha</p><p>beta</p>")
        assert document.body is not None
        beta = document.body.element_children[1].children[0]
        address = address_of(beta)
        document.body.insert_at(0, Element("p", children=[Text("new")]))
        assert resolve(document, address) is not beta
