"""Unit tests for the tag reconciler."""

import pytest

from docforge.strategies.markup.reconciler import (
    CData,
    CloseTag,
    Comment,
    OpenTag,
    TagEventSource,
    TagReconciler,
    collapse_empty_tags,
    encode_text,
    sanitize,
)


def reconcile(markup: str) -> str:
    """Run the stack machine without the post-pass."""
    return TagReconciler().run(TagEventSource().parse(markup))


# =============================================================================
# Event Source Tests
# =============================================================================


class TestTagEventSource:
    """Test suite for TagEventSource."""

    def test_namespaced_tags(self):
        """Test that ac: prefixed tags keep their full name."""
        events = TagEventSource().parse('<ac:parameter ac:name="code">x</ac:parameter>')
        assert events[0] == OpenTag("ac:parameter", [("ac:name", "code")])
        assert events[-1] == CloseTag("ac:parameter")

    def test_cdata_is_preserved(self):
        """Test that CDATA sections come through as a single raw event."""
        events = TagEventSource().parse("<p><![CDATA[a --> b]]></p>")
        assert CData("<![CDATA[a --> b]]>") in events

    def test_self_closed_non_void_tag(self):
        """Test that <p/> becomes an open and a close event."""
        events = TagEventSource().parse("<p/>")
        assert events == [OpenTag("p", []), CloseTag("p")]

    def test_marker_like_comment_stays_a_comment(self):
        """Test that a comment shaped like a CDATA stand-in is not swapped for CDATA."""
        events = TagEventSource().parse("<p><![CDATA[x]]><!--docforge-cdata-0--></p>")
        assert events[1:3] == [CData("<![CDATA[x]]>"), Comment("docforge-cdata-0")]


# =============================================================================
# Stack Machine Tests
# =============================================================================


class TestTagReconciler:
    """Test suite for the reconciler stack machine."""

    def test_well_formed_input_unchanged(self):
        """Test that properly nested markup is re-emitted as is."""
        markup = '<div><p>Hello <strong>world</strong></p></div>'
        assert reconcile(markup) == markup

    def test_mismatch_closes_popped_then_expected(self):
        """Test recovery for <p><div></p></div>."""
        assert reconcile("<p><div></p></div>") == "<p><div></div></p>"

    def test_mismatch_with_unopened_close_tag(self):
        """Test recovery when the closed tag was never opened."""
        assert reconcile("<div><p>x</span></p></div>") == "<div><p>x</p></div>"

    def test_mismatch_unwinds_intervening_tags(self):
        """Test recovery closes every tag above the expected one."""
        assert reconcile("<ul><li>a<li>b</ul>") == "<ul><li>a<li>b</li></li></ul>"

    def test_mismatch_counter(self):
        """Test that recovered close tags are counted."""
        reconciler = TagReconciler()
        reconciler.run(TagEventSource().parse("<p><div></p></div>"))
        assert reconciler.mismatches == 2
        assert reconciler.stack == []

    def test_unclosed_tags_closed_at_end(self):
        """Test that open tags are closed in LIFO order at end of input."""
        assert reconcile("<p><strong>bold") == "<p><strong>bold</strong></p>"

    def test_disallowed_tags_dropped(self):
        """Test that tags outside the allow-list are removed, text kept."""
        assert reconcile('<p><font color="red">hi</font></p>') == "<p>hi</p>"

    def test_self_closing_tags(self):
        """Test that void tags are emitted self-closed and never pushed."""
        result = reconcile('<p>a<br>b<img src="x.png"></br></p>')
        assert result == '<p>a<br/>b<img src="x.png"/></p>'

    def test_attribute_values_encoded(self):
        """Test that attribute values are entity-encoded."""
        result = reconcile("<a href=\"?a=1&b=2\" title='say \"hi\"'>x</a>")
        assert result == '<a href="?a=1&amp;b=2" title="say &quot;hi&quot;">x</a>'

    def test_comment_reemitted(self):
        """Test that comments are encoded and kept."""
        assert reconcile("<p>x<!-- a < b --></p>") == "<p>x<!-- a &lt; b --></p>"

    def test_uppercase_tags_lowered(self):
        """Test that tag names are matched case-insensitively."""
        assert reconcile("<P>Hi</P>") == "<p>Hi</p>"


# =============================================================================
# Text Encoding Tests
# =============================================================================


class TestEncodeText:
    """Test suite for text node encoding."""

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("a < b", "a &lt; b"),
            ("a &lt; b", "a &lt; b"),
            ("a &amp;lt; b", "a &lt; b"),
            ("Tom & Jerry", "Tom &amp; Jerry"),
            ("\u00a0", "&nbsp;"),
            ('say "hi"', 'say "hi"'),
        ],
    )
    def test_encode_text(self, text, expected):
        """Test that encoding is idempotent on already escaped text."""
        assert encode_text(text) == expected


# =============================================================================
# Post-pass and sanitize() Tests
# =============================================================================


class TestSanitize:
    """Test suite for sanitize."""

    def test_empty_input(self):
        """Test that empty input yields an empty string."""
        assert sanitize("") == ""

    def test_mismatch_scenario_end_to_end(self):
        """Test that the emptied paragraph gets a placeholder."""
        assert sanitize("<p><div></p></div>") == "<p>&nbsp;</p>"

    def test_break_only_paragraph(self):
        """Test that a paragraph holding only a line break is kept visible."""
        assert sanitize("<p><br/></p>") == "<p>&nbsp;</p>"

    def test_empty_pairs_collapse_to_fixed_point(self):
        """Test that nested empty pairs are removed and cells get a placeholder."""
        assert sanitize("<div><span> </span></div><td></td>") == "<td>&nbsp;</td>"

    def test_placeholder_drops_attributes(self):
        """Test that placeholder blocks are emitted without their attributes."""
        assert collapse_empty_tags('<td class="x"></td>') == "<td>&nbsp;</td>"

    @pytest.mark.parametrize(
        "markup",
        ["<p><b>x<br/></b></p>", '<p><i><img src="a.png"/></i></p>'],
    )
    def test_void_child_keeps_parent_pair(self, markup):
        """Test that a self-closed child is never taken for an empty pair."""
        assert sanitize(markup) == markup

    def test_comment_resembling_cdata_stand_in(self):
        """Test that such a comment and the content after it survive."""
        markup = "<p>a<!--docforge-cdata-3--></p><p>tail</p>"
        assert sanitize(markup) == markup

    def test_namespaced_empty_pairs_kept(self):
        """Test that empty macro parameters are not removed."""
        markup = '<ac:parameter ac:name="title"></ac:parameter>'
        assert sanitize(markup) == markup

    def test_diagram_macro_survives(self):
        """Test that a diagram macro with CDATA passes through unchanged."""
        markup = (
            '<ac:structured-macro ac:name="mermaid">'
            '<ac:parameter ac:name="code"><![CDATA[graph TD; A-->B]]></ac:parameter>'
            "</ac:structured-macro>"
        )
        assert sanitize(markup) == markup

    def test_inter_tag_whitespace_removed(self):
        """Test that whitespace between tags is dropped and runs collapsed."""
        assert sanitize("<p>a   b</p>\n  <p>c</p>") == "<p>a b</p><p>c</p>"

    @pytest.mark.parametrize(
        "markup",
        [
            "<p><div></p></div>",
            "<ul><li>a<li>b</ul>",
            "<p>Tom &amp; Jerry &lt;3</p><table><tr><td></td></tr></table>",
            '<div><a href="x?a=1&amp;b=2">link</a><br></div>',
            "<p><b>x<br/></b></p>",
            '<p><i><img src="a.png"/></i></p>',
        ],
    )
    def test_idempotent(self, markup):
        """Test that sanitizing twice equals sanitizing once."""
        once = sanitize(markup)
        assert sanitize(once) == once

    @pytest.mark.parametrize(
        "markup",
        [
            "<div><p><strong>x</div></p><em>y",
            "<p><b>x<br/></b></p>",
            '<p><i><img src="a.png"/></i></p>',
        ],
    )
    def test_output_is_balanced(self, markup):
        """Test that every opened tag is closed for adversarial input."""
        output = sanitize(markup)
        events = TagEventSource().parse(output)
        stack = []
        for event in events:
            if isinstance(event, OpenTag) and event.name not in ("br", "img", "hr"):
                stack.append(event.name)
            elif isinstance(event, CloseTag):
                assert stack and stack.pop() == event.name
        assert stack == []
