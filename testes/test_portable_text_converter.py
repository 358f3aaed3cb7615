import os
import sys

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

import pytest

from legacy_migrator.config import ConverterConfig
from legacy_migrator.models.lookup import LookupTables
from legacy_migrator.models.portable_text import (
    BOLD,
    ColumnBreak,
    CrossReferenceEmbed,
    HorizontalLine,
    ImagePlaceholder,
    TextBlock,
    VideoEmbed,
)
from legacy_migrator.parsers.portable_text import PortableTextConverter, convert_html_to_portable_text

BASE = "https://www.example.com"


@pytest.fixture
def tables():
    return LookupTables.from_dicts(
        products={"7": "audioresearch/ref160m"},
        site_tree={"42": {"url_segment": "o-nas", "node_kind": "page"}},
    )


@pytest.fixture
def converter(tables):
    return PortableTextConverter(tables, ConverterConfig(canonical_base_url=BASE))


def types_of(result):
    return [type(n) for n in result.nodes]


def test_end_to_end_scenario(converter):
    html = (
        '<h2>Intro</h2><p>Hello <strong>world</strong>, see '
        '<a href="[sitetree_link,id=42]">this</a>.</p><hr>'
    )
    result = converter.convert(html)

    assert types_of(result) == [TextBlock, TextBlock, HorizontalLine]
    heading, paragraph, _ = result.nodes
    assert heading.style == "h2"
    assert heading.text == "Intro"

    assert [s.text for s in paragraph.children] == ["Hello ", "world", ", see ", "this", "."]
    (link,) = paragraph.mark_defs
    assert [s.marks for s in paragraph.children] == [(), (BOLD,), (), (link.key,), ()]
    assert link.href == f"{BASE}/o-nas"

    assert len(result.links) == 1
    assert result.unresolved == ()


def test_image_inside_paragraph_splits_it_in_order(converter):
    result = converter.convert('<p>A<img src="/a.jpg">B</p>')
    assert types_of(result) == [TextBlock, ImagePlaceholder, TextBlock]
    assert result.nodes[0].text == "A"
    assert result.nodes[1].src == f"{BASE}/a.jpg"
    assert result.nodes[2].text == "B"


def test_paragraph_with_only_media(converter):
    result = converter.convert('<p><img src="/a.jpg" alt="x"></p><p>[image src="/b.jpg" class="left"]</p>')
    assert types_of(result) == [ImagePlaceholder, ImagePlaceholder]
    assert result.nodes[1].alignment == "left"


def test_video_embeds_inside_and_outside_paragraphs(converter):
    html = (
        '<p><iframe src="//www.youtube.com/embed/dQw4w9WgXcQ"></iframe></p>'
        '<iframe src="https://player.vimeo.com/video/42"></iframe>'
    )
    result = converter.convert(html)
    assert types_of(result) == [VideoEmbed, VideoEmbed]
    assert [n.provider for n in result.nodes] == ["youtube", "vimeo"]


@pytest.mark.parametrize("html", ["<p>&nbsp;</p>", "<p>\xa0</p>", "<p> <br> </p>", "<p></p>"])
def test_empty_paragraphs_produce_no_nodes(converter, html):
    assert converter.convert(html).nodes == ()


def test_all_heading_levels_collapse_with_limit_one(converter):
    html = "".join(f"<h{i}>T{i}</h{i}>" for i in range(1, 7))
    result = converter.convert(html)
    assert len(result.nodes) == 6
    assert {n.style for n in result.nodes} == {"h2"}


def test_heading_levels_shift_with_limit_two(tables):
    converter = PortableTextConverter(tables, ConverterConfig(canonical_base_url=BASE, heading_style_limit=2))
    result = converter.convert("<h3>A</h3><p>x</p><h4>B</h4><h5>C</h5>")
    assert [(n.text, n.style) for n in result.nodes] == [("A", "h2"), ("x", "normal"), ("B", "h3"), ("C", "h3")]


def test_heading_markup_is_stripped(converter):
    (node,) = converter.convert("<h2 id='t'><strong>Big</strong> &amp; bold</h2>").nodes
    assert node.text == "Big & bold"
    assert node.children[0].marks == ()


def test_heading_with_image_emits_text_then_image(converter):
    result = converter.convert('<h2>[image src="/h.jpg"] Title</h2>')
    assert types_of(result) == [TextBlock, ImagePlaceholder]
    assert result.nodes[0].text == "Title"


def test_heading_with_image_and_single_character_keeps_only_image(converter):
    result = converter.convert('<h2>X<img src="/h.jpg"></h2>')
    assert types_of(result) == [ImagePlaceholder]


def test_empty_heading_is_dropped(converter):
    assert converter.convert("<h2> &nbsp; </h2>").nodes == ()


def test_lists(converter):
    html = "<ul><li>One</li><li>&nbsp;</li><li><em>Two</em></li></ul><ol><li>Three</li></ol>"
    result = converter.convert(html)
    assert [(n.text, n.list_item, n.level) for n in result.nodes] == [
        ("One", "bullet", 1),
        ("Two", "bullet", 1),
        ("Three", "number", 1),
    ]


def test_list_item_media_follows_the_item(converter):
    result = converter.convert('<ul><li>Item<img src="/i.jpg"></li><li><img src="/j.jpg"></li></ul>')
    assert types_of(result) == [TextBlock, ImagePlaceholder, ImagePlaceholder]
    assert result.nodes[0].list_item == "bullet"


def test_column_break_converted_by_default(converter):
    result = converter.convert("<p>Left</p><!-- pagebreak --><p>Right</p>")
    assert types_of(result) == [TextBlock, ColumnBreak, TextBlock]


def test_column_break_in_its_own_paragraph(converter):
    result = converter.convert("<p>Left</p><p><!-- pagebreak --></p><p>Right</p>")
    assert types_of(result) == [TextBlock, ColumnBreak, TextBlock]


def test_column_break_dropped_per_call(converter):
    html = "<p>Left</p><p><!-- pagebreak --></p><!-- pagebreak --><p>Right</p>"
    result = converter.convert(html, drop_column_break_marker=True)
    assert types_of(result) == [TextBlock, TextBlock]


def test_column_break_dropped_by_config(tables):
    config = ConverterConfig(canonical_base_url=BASE, drop_column_break_marker=True)
    result = PortableTextConverter(tables, config).convert("<p>L</p><!-- pagebreak --><p>R</p>")
    assert types_of(result) == [TextBlock, TextBlock]


def test_cross_reference_embed(converter):
    result = converter.convert("<p>Zobacz też:</p><p>[recenzja id=12]</p>")
    assert types_of(result) == [TextBlock, CrossReferenceEmbed]
    assert result.nodes[1].legacy_id == "12"


def test_unresolved_links_are_collected(converter):
    result = converter.convert('<p><a href="[product_link,id=999999]">x</a> and <a href="[product_link,id=7]">y</a></p>')
    hrefs = [d.href for d in result.nodes[0].mark_defs]
    assert hrefs == ["#", f"{BASE}/audioresearch/ref160m"]
    assert [(u.kind, u.legacy_id) for u in result.unresolved] == [("product_link", "999999")]


def test_null_and_empty_input(converter):
    assert converter.convert(None).nodes == ()
    assert converter.convert("").nodes == ()
    assert converter.convert("<div>loose text only</div>").nodes == ()


def test_malformed_markup_never_raises(converter):
    html = "<p><strong>never closed</p><h2><em>oops</h2><ul><li>a<li>b</ul><p>[gallery id=1] tekst</p>"
    result = converter.convert(html)
    assert result.nodes[0].children[0].marks == (BOLD,)
    assert all(isinstance(n, TextBlock) for n in result.nodes)


def test_keys_are_unique_across_the_document(converter):
    html = (
        "<h2>T</h2><p>a <b>b</b> <a href='/x'>c</a></p><hr><ul><li>d</li><li>e</li></ul>"
        '<p>f<img src="/g.jpg">h</p><!-- pagebreak -->[recenzja id=1]'
    )
    result = converter.convert(html)
    keys = []
    for node in result.nodes:
        keys.append(node.key)
        if isinstance(node, TextBlock):
            keys.extend(s.key for s in node.children)
            keys.extend(d.key for d in node.mark_defs)
    assert len(keys) == len(set(keys))


def test_keys_differ_between_conversions(converter):
    first = converter.convert("<p>a</p>").nodes[0].key
    second = converter.convert("<p>a</p>").nodes[0].key
    assert first != second


def test_payload_uses_wire_names(converter):
    payload = converter.convert('<p><a href="/x">l</a></p><p>[image src="/a.jpg"]</p>').to_payload()
    block, image = payload["nodes"]
    assert block["_type"] == "block"
    assert block["markDefs"][0]["_type"] == "link"
    assert block["markDefs"][0]["openInNewTab"] is True
    assert block["children"][0]["marks"] == [block["markDefs"][0]["_key"]]
    assert "listItem" not in block
    assert image["_type"] == "imagePlaceholder"
    assert "float" not in image


def test_convenience_function_defaults():
    result = convert_html_to_portable_text("<p>Hi</p>")
    assert result.nodes[0].text == "Hi"
