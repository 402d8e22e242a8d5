"""Tag reconciler for storage-format markup.

Re-emits a document through a stack of open tags so that the output only
contains allow-listed tags and every opened tag is closed in order, even
when the input nests tags incorrectly.

The event source is a thin ``html.parser.HTMLParser`` subclass. CDATA
sections are swapped for comment markers before parsing (the stdlib parser
does not keep them intact) and restored verbatim on output.
"""

import html
import logging
import re
import secrets
from dataclasses import dataclass, field
from html.parser import HTMLParser

logger = logging.getLogger(__name__)


ALLOWED_TAGS: frozenset[str] = frozenset(
    {
        "p", "br", "div", "span", "strong", "em", "b", "i", "u", "s",
        "sub", "sup", "h1", "h2", "h3", "h4", "h5", "h6",
        "ul", "ol", "li", "table", "thead", "tbody", "tfoot", "tr", "td", "th",
        "a", "img", "blockquote", "pre", "code", "hr",
        "ac:structured-macro", "ac:parameter", "ac:rich-text-body",
        "ac:plain-text-body",
    }
)

SELF_CLOSING_TAGS: frozenset[str] = frozenset(
    {
        "br", "hr", "img", "input", "meta", "link", "area", "base", "col",
        "embed", "source", "track", "wbr",
    }
)

# Empty blocks that must keep a visible placeholder
PLACEHOLDER_TAGS: frozenset[str] = frozenset({"p", "td", "th", "li"})

_CDATA = re.compile(r"<!\[CDATA\[[\s\S]*?\]\]>")
_EMPTY_BREAK_PARAGRAPH = re.compile(r"<p>\s*<br\s*/?>\s*</p>", re.IGNORECASE)
# Attributes start with whitespace and self-closed tags never match
_EMPTY_PAIR = re.compile(r"<([a-z][a-z0-9]*)((?:\s[^>]*)?)(?<!/)>\s*</\1>")
_BETWEEN_TAGS = re.compile(r">\s+<")
_WHITESPACE = re.compile(r"\s+")


# =============================================================================
# Events
# =============================================================================


@dataclass(frozen=True)
class OpenTag:
    name: str
    attrs: list[tuple[str, str | None]] = field(default_factory=list)


@dataclass(frozen=True)
class CloseTag:
    name: str


@dataclass(frozen=True)
class Text:
    data: str


@dataclass(frozen=True)
class Comment:
    data: str


@dataclass(frozen=True)
class CData:
    raw: str


Event = OpenTag | CloseTag | Text | Comment | CData


class TagEventSource(HTMLParser):
    """Streams markup as a flat list of tag, text and comment events.

    Tag names are lower-cased by the parser; the ``ac:`` prefix survives
    as part of the name.
    """

    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self.events: list[Event] = []
        self._cdata: list[str] = []
        self._marker_prefix = ""

    def parse(self, markup: str) -> list[Event]:
        """Feed the whole document and return its events in order."""
        self.reset()
        self.events = []
        self._cdata = []
        # Fresh per parse so a comment already in the document cannot collide
        self._marker_prefix = f"docforge-cdata-{secrets.token_hex(8)}-"
        shielded = _CDATA.sub(self._shield_cdata, markup)
        try:
            self.feed(shielded)
            self.close()
        except Exception as e:
            logger.warning(f"Markup parser stopped early: {e}", exc_info=True)
        return self.events

    def _shield_cdata(self, match: re.Match) -> str:
        self._cdata.append(match.group(0))
        return f"<!--{self._marker_prefix}{len(self._cdata) - 1}-->"

    def handle_starttag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        self.events.append(OpenTag(tag, attrs))

    def handle_startendtag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        self.events.append(OpenTag(tag, attrs))
        if tag not in SELF_CLOSING_TAGS:
            self.events.append(CloseTag(tag))

    def handle_endtag(self, tag: str) -> None:
        self.events.append(CloseTag(tag))

    def handle_data(self, data: str) -> None:
        self.events.append(Text(data))

    def handle_comment(self, data: str) -> None:
        index = data.removeprefix(self._marker_prefix)
        if data.startswith(self._marker_prefix) and index.isdigit() and int(index) < len(self._cdata):
            self.events.append(CData(self._cdata[int(index)]))
        else:
            self.events.append(Comment(data))


# =============================================================================
# Stack machine
# =============================================================================


def _full_unescape(text: str) -> str:
    # Repeat until stable so already-escaped input does not get double-escaped
    while True:
        unescaped = html.unescape(text)
        if unescaped == text:
            return text
        text = unescaped


def encode_text(text: str) -> str:
    """Entity-encode a text node, idempotently."""
    return html.escape(_full_unescape(text), quote=False).replace("\xa0", "&nbsp;")


def _encode_attrs(attrs: list[tuple[str, str | None]]) -> str:
    return "".join(
        f' {name}="{html.escape(value, quote=True)}"'
        for name, value in attrs
        if value is not None
    )


class TagReconciler:
    """Single-pass stack machine over tag events.

    Attributes:
        stack: Names of tags opened and not yet closed.
        mismatches: Number of close tags that needed recovery.
    """

    def __init__(self) -> None:
        self.stack: list[str] = []
        self.mismatches = 0
        self._out: list[str] = []

    def run(self, events: list[Event]) -> str:
        for event in events:
            match event:
                case OpenTag(name, attrs):
                    self.on_open(name, attrs)
                case CloseTag(name):
                    self.on_close(name)
                case Text(data):
                    self.on_text(data)
                case Comment(data):
                    self.on_comment(data)
                case CData(raw):
                    self.on_cdata(raw)
        self.finish()
        return "".join(self._out)

    def on_open(self, name: str, attrs: list[tuple[str, str | None]]) -> None:
        if name not in ALLOWED_TAGS:
            return
        if name in SELF_CLOSING_TAGS:
            self._out.append(f"<{name}{_encode_attrs(attrs)}/>")
            return
        self._out.append(f"<{name}{_encode_attrs(attrs)}>")
        self.stack.append(name)

    def on_close(self, name: str) -> None:
        if name not in ALLOWED_TAGS or name in SELF_CLOSING_TAGS:
            return
        popped = self.stack.pop() if self.stack else None
        if popped == name:
            self._out.append(f"</{name}>")
            return
        self.recover_mismatch(popped, name)

    def recover_mismatch(self, popped: str | None, expected: str) -> None:
        """Close the wrongly popped tag, then unwind down to ``expected``.

        If ``expected`` is not open at all, only the popped tag is closed.
        """
        self.mismatches += 1
        logger.debug(f"Tag mismatch: expected </{expected}>, open tag was <{popped}>")
        if popped is not None:
            self._out.append(f"</{popped}>")

        index = len(self.stack) - 1
        while index >= 0 and self.stack[index] != expected:
            index -= 1
        if index < 0:
            return

        for open_name in reversed(self.stack[index + 1 :]):
            self._out.append(f"</{open_name}>")
        self._out.append(f"</{expected}>")
        del self.stack[index:]

    def on_text(self, data: str) -> None:
        self._out.append(encode_text(data))

    def on_comment(self, data: str) -> None:
        self._out.append(f"<!--{encode_text(data)}-->")

    def on_cdata(self, raw: str) -> None:
        self._out.append(raw)

    def finish(self) -> None:
        while self.stack:
            self._out.append(f"</{self.stack.pop()}>")


# =============================================================================
# Post-pass
# =============================================================================


def _replace_empty_pair(match: re.Match) -> str:
    name = match.group(1)
    if name in PLACEHOLDER_TAGS:
        return f"<{name}>&nbsp;</{name}>"
    return ""


def collapse_empty_tags(markup: str) -> str:
    """Fill empty block placeholders and drop other empty tag pairs.

    Placeholder blocks are re-emitted bare, without their attributes.

    Repeats until nothing changes, since removing an inner pair can leave
    its parent empty.
    """
    while True:
        collapsed = _EMPTY_PAIR.sub(_replace_empty_pair, markup)
        if collapsed == markup:
            break
        markup = collapsed
    markup = _BETWEEN_TAGS.sub("><", markup)
    return _WHITESPACE.sub(" ", markup).strip()


def sanitize(text: str) -> str:
    """Reconcile a document to allow-listed, properly nested markup.

    Never raises for malformed markup; parser errors are logged and the
    events collected so far are still reconciled.

    Args:
        text: Normalized storage-format markup.

    Returns:
        Well-formed markup.
    """
    if not text:
        return ""

    text = _EMPTY_BREAK_PARAGRAPH.sub("<p>&nbsp;</p>", text)
    events = TagEventSource().parse(text)

    reconciler = TagReconciler()
    output = reconciler.run(events)
    if reconciler.mismatches:
        logger.info(f"Recovered {reconciler.mismatches} mismatched close tag(s)")

    return collapse_empty_tags(output)
