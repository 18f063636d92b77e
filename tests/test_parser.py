"""
Tests for readmegen.parser module.

Tests parsing of mixed Markdown / HTML README markup into nodes.
"""

from unittest.mock import patch

import pytest

from readmegen.parser import (
    HEADING,
    IMAGE,
    LINK,
    NODE_KINDS,
    PARAGRAPH,
    TEXT,
    flatten_text,
    parse_document,
)
from readmegen.renderer import PLACEHOLDER_LOGO_URI, render_readme
from readmegen.schema import Descriptor, Link, sample_descriptor


def scenario_descriptor() -> Descriptor:
    return Descriptor(title="X", description="Y", links=(Link("A", "#"),))


class TestGeneratedMarkup:
    """Tests parsing renderer output."""

    def test_scenario_structure(self):
        """The minimal README parses into logo, title, badges, links, description."""
        nodes = parse_document(render_readme(scenario_descriptor()))

        assert [n.kind for n in nodes] == [PARAGRAPH, HEADING, PARAGRAPH, HEADING, PARAGRAPH]

        logo_block, title, badge_row, link_row, description = nodes
        assert logo_block.align == "center"
        assert [c.kind for c in logo_block.children] == [IMAGE]
        assert logo_block.children[0].src == PLACEHOLDER_LOGO_URI
        assert logo_block.children[0].attrs["width"] == "150"

        assert title.level == 1
        assert title.text == "X"

        assert badge_row.align == "center"
        assert badge_row.children == ()

        assert link_row.level == 4
        assert [c.kind for c in link_row.children] == [LINK]
        assert link_row.children[0].text == "A"
        assert link_row.children[0].href == "#"

        assert description.text == "Y"

    def test_screenshots_become_images(self):
        descriptor = Descriptor(title="T", screenshots=("/one.png", "/two.png"))
        nodes = parse_document(render_readme(descriptor))

        images = [n for n in nodes if n.kind == IMAGE]
        assert [(n.alt, n.src) for n in images] == [
            ("Screenshot 1", "/one.png"),
            ("Screenshot 2", "/two.png"),
        ]
        assert images[0].attrs["width"] == "1280"

    def test_link_row_separators_are_text(self):
        descriptor = Descriptor(links=(Link("A", "#a"), Link("B", "#b")))
        link_row = [n for n in parse_document(render_readme(descriptor)) if n.level == 4][0]

        assert [c.kind for c in link_row.children] == [LINK, TEXT, LINK]
        assert link_row.children[1].text.strip() == "·"

    def test_badge_row_with_badge(self):
        descriptor = Descriptor(badges=frozenset({"PWA"}))
        badge_row = parse_document(render_readme(descriptor))[2]

        assert badge_row.kind == PARAGRAPH
        assert badge_row.children[0].kind == IMAGE
        assert "pwa-shields.com" in badge_row.children[0].src
        assert badge_row.children[0].attrs["height"] == "20"

    def test_round_trip_containment(self):
        """Title, description and every link survive render + parse."""
        descriptor = sample_descriptor()
        flat = flatten_text(parse_document(render_readme(descriptor)))

        assert descriptor.title in flat
        assert descriptor.description in flat
        for link in descriptor.links:
            assert link.label in flat
            assert link.url in flat

    @pytest.mark.parametrize("title,description", [
        ("", ""),
        ("Ünïcödé ✨", "Emoji 🚀 and accents é"),
        ("Tom & Jerry", "Cats & mice"),
    ])
    def test_round_trip_unusual_text(self, title, description):
        descriptor = Descriptor(title=title, description=description, links=(Link("Go", "https://x.io/?a=1"),))
        flat = flatten_text(parse_document(render_readme(descriptor)))

        assert title in flat
        assert description in flat
        assert "https://x.io/?a=1" in flat

    @pytest.mark.parametrize("description", [
        " padded ",
        "  leading",
        "trailing   ",
        "two  spaces inside",
        "line one\nline two",
    ])
    def test_round_trip_keeps_whitespace(self, description):
        descriptor = Descriptor(title=f" {description} ", description=description)
        flat = flatten_text(parse_document(render_readme(descriptor)))

        assert descriptor.title in flat
        assert description in flat

    def test_blank_line_splits_description(self):
        """A blank line ends the HTML block, so the halves parse separately."""
        descriptor = Descriptor(description="para one\n\npara two")
        flat = flatten_text(parse_document(render_readme(descriptor)))

        assert "para one" in flat
        assert "para two" in flat
        assert descriptor.description not in flat

    def test_entities_are_decoded(self):
        descriptor = Descriptor(description="a &lt; b")
        nodes = parse_document(render_readme(descriptor))

        description = [n for n in nodes if n.kind == PARAGRAPH][-1]
        assert description.text == "a < b"
        assert "&lt;" not in flatten_text(nodes)

    def test_every_kind_is_known(self):
        descriptor = sample_descriptor()
        seen = set()

        def walk(items):
            for node in items:
                seen.add(node.kind)
                walk(node.children)

        walk(parse_document(render_readme(descriptor)))
        walk(parse_document("# H\n\ntext [a](/b) ![c](/d)\n\n```\ncode\n```\n\n---"))
        assert seen == set(NODE_KINDS)

    def test_nodes_are_hashable(self):
        nodes = parse_document(render_readme(scenario_descriptor()))
        assert len(set(nodes)) == len(nodes)
        assert hash(nodes[0]) == hash(parse_document(render_readme(scenario_descriptor()))[0])


class TestMarkdownSyntax:
    """Tests for line-oriented Markdown input."""

    @pytest.mark.parametrize("level", [1, 2, 3, 4, 5, 6])
    def test_atx_headings(self, level):
        nodes = parse_document(f"{'#' * level} Heading")
        assert nodes[0].kind == HEADING
        assert nodes[0].level == level
        assert nodes[0].text == "Heading"

    def test_paragraph_with_markdown_link(self):
        nodes = parse_document("Read the [docs](https://docs.example.com) first.")

        assert len(nodes) == 1
        paragraph = nodes[0]
        assert paragraph.kind == PARAGRAPH
        assert paragraph.align is None
        links = [c for c in paragraph.children if c.kind == LINK]
        assert links[0].href == "https://docs.example.com"
        assert links[0].text == "docs"

    def test_markdown_image(self):
        nodes = parse_document("![Screenshot 3](/shot.png)")
        assert nodes[0].kind == IMAGE
        assert nodes[0].alt == "Screenshot 3"
        assert nodes[0].src == "/shot.png"

    def test_inline_html_anchor(self):
        nodes = parse_document('Click <a href="/x" data-extra="1">here</a> now')
        link = [c for c in nodes[0].children if c.kind == LINK][0]

        assert link.href == "/x"
        assert link.text == "here"
        assert link.attrs["data-extra"] == "1"

    def test_inline_html_image(self):
        nodes = parse_document('Look: <img src="/a.png" alt="thing"> here')
        image = [c for c in nodes[0].children if c.kind == IMAGE][0]
        assert image.src == "/a.png"
        assert image.alt == "thing"

    def test_unknown_attributes_retained(self):
        nodes = parse_document('<p align="left" data-role="hero" class="a b">Hi</p>')
        assert nodes[0].align == "left"
        assert nodes[0].attrs["data-role"] == "hero"
        assert nodes[0].attrs["class"] == "a b"

    def test_unknown_block_tag_is_raw(self):
        nodes = parse_document("<table><tr><td>cell</td></tr></table>")
        assert nodes[0].kind == "raw"
        assert nodes[0].text == "cell"

    def test_code_fence_is_raw(self):
        nodes = parse_document("```\nprint('hi')\n```")
        assert nodes[0].kind == "raw"
        assert "print('hi')" in nodes[0].text


class TestFailurePolicy:
    """The parser never raises."""

    @pytest.mark.parametrize("text", [
        "",
        "<<<>>>",
        "<div",
        "[broken](",
        '<p align="center"><b>unterminated',
        "</p></h4></a>",
        "\x00\x01 binary",
        "<img src=>",
    ])
    def test_malformed_input_does_not_raise(self, text):
        nodes = parse_document(text)
        assert isinstance(nodes, tuple)

    def test_empty_input(self):
        assert parse_document("") == ()

    def test_html_failure_degrades_to_literal_text(self):
        """A raw span that cannot be parsed is kept as text."""
        with patch("readmegen.parser.BeautifulSoup", side_effect=RuntimeError("boom")):
            nodes = parse_document('<p align="center">Y</p>')

        assert len(nodes) == 1
        assert nodes[0].kind == TEXT
        assert nodes[0].text.strip() == '<p align="center">Y</p>'

    def test_tokenizer_failure_degrades_to_literal_text(self):
        with patch("readmegen.parser._markdown", side_effect=RuntimeError("boom")):
            nodes = parse_document("# Title")

        assert nodes[0].kind == TEXT
        assert nodes[0].text == "# Title"
