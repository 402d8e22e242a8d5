"""Encoding and markup normalizer.

Repairs text that went through a UTF-8 -> cp1252 -> UTF-8 round trip
(mojibake), strips control characters and tidies whitespace before the
markup is handed to the tag reconciler.

The substitutions run in a fixed order. Later steps rely on earlier ones,
e.g. C1 stripping turns the closing-quote sequence into its two-character
form that the repair table expects, and NBSP conversion must run after the
repair table because some Vietnamese sequences end in U+00A0.
"""

import logging
import re

logger = logging.getLogger(__name__)


# =============================================================================
# Patterns
# =============================================================================

_CODE_FENCE_OPEN = re.compile(r"^\s*```[\w-]*[ \t]*\n?")
_CODE_FENCE_CLOSE = re.compile(r"\n?```\s*$")

_BOM_AND_ZERO_WIDTH = re.compile("[\ufeff\u200b]")
# C0 minus tab/LF/CR, DEL, and the C1 block
_CONTROL_CHARS = re.compile("[\x00-\x08\x0b\x0c\x0e-\x1f\x7f-\x9f]")

# UTF-8 bytes read as cp1252, mapped back to the intended character.
# Ordered longest-first: the bare "â€" entry is what is left of a
# right double quote once its undefined 0x9D byte has been stripped.
MOJIBAKE_TABLE: tuple[tuple[str, str], ...] = (
    ("â€™", "’"),  # right single quote
    ("â€˜", "‘"),  # left single quote
    ("â€œ", "“"),  # left double quote
    ("â€¦", "…"),  # ellipsis
    ("â€“", "–"),  # en dash
    ("â€”", "—"),  # em dash
    ("â€", "”"),  # right double quote
    ("Ä‚", "Ă"),  # A with breve
    ("Äƒ", "ă"),  # a with breve
    ("Ä‘", "đ"),  # d with stroke
    ("Ã‚", "Â"),  # A with circumflex
    ("Ã¢", "â"),  # a with circumflex
    ("ÃŠ", "Ê"),  # E with circumflex
    ("Ãª", "ê"),  # e with circumflex
    ("Ã”", "Ô"),  # O with circumflex
    ("Ã´", "ô"),  # o with circumflex
    ("Ã¡", "á"),  # a with acute
    ("Ã©", "é"),  # e with acute
    ("\u00c3\u00ad", "\u00ed"),  # i with acute
    ("Ã³", "ó"),  # o with acute
    ("Ãº", "ú"),  # u with acute
    ("Ã¹", "ù"),  # u with grave
    ("Ã²", "ò"),  # o with grave
    ("Ã¨", "è"),  # e with grave
    ("Ã¬", "ì"),  # i with grave
    ("Ã£", "ã"),  # a with tilde
    ("Ãµ", "õ"),  # o with tilde
    ("Ã½", "ý"),  # y with acute
    ("Æ¯", "Ư"),  # U with horn
    ("Æ°", "ư"),  # u with horn
    ("Æ¡", "ơ"),  # o with horn
    ("\u00c6\u00a0", "\u01a0"),  # O with horn
)

_MOJIBAKE = re.compile("|".join(re.escape(bad) for bad, _ in MOJIBAKE_TABLE))
_MOJIBAKE_MAP = dict(MOJIBAKE_TABLE)

_LINE_BREAKS = re.compile("\r\n|\r|\u2028|\u2029")
_BARE_AMPERSAND = re.compile(r"&(?!(?:amp|lt|gt|quot|apos|nbsp|#\d+|#x[0-9a-fA-F]+);)")

_HORIZONTAL_SPACE = re.compile(r"[ \t]+")
_LEADING_SPACE = re.compile(r"\n[ \t]+")
_TRAILING_SPACE = re.compile(r"[ \t]+\n")
_BLANK_LINES = re.compile(r"\n{3,}")
_BETWEEN_TAGS = re.compile(r">\s+<")


# =============================================================================
# Steps
# =============================================================================


def strip_code_fences(text: str) -> str:
    """Remove a Markdown code fence wrapped around the whole text."""
    if not text.lstrip().startswith("```"):
        return text
    text = _CODE_FENCE_OPEN.sub("", text, count=1)
    return _CODE_FENCE_CLOSE.sub("", text, count=1)


def strip_control_characters(text: str) -> str:
    """Drop the byte order mark, zero-width spaces and C0/C1 controls."""
    text = _BOM_AND_ZERO_WIDTH.sub("", text)
    return _CONTROL_CHARS.sub("", text)


def repair_mojibake(text: str) -> str:
    """Map known misdecoded sequences back to their characters.

    Repeats until stable: a repaired letter can complete a new sequence
    with the text after it.
    """
    while True:
        repaired = _MOJIBAKE.sub(lambda m: _MOJIBAKE_MAP[m.group(0)], text)
        if repaired == text:
            return text
        text = repaired


def escape_bare_ampersands(text: str) -> str:
    """Escape ``&`` that does not start a known entity or character reference."""
    return _BARE_AMPERSAND.sub("&amp;", text)


def collapse_whitespace(text: str) -> str:
    text = _HORIZONTAL_SPACE.sub(" ", text)
    text = _LEADING_SPACE.sub("\n", text)
    text = _TRAILING_SPACE.sub("\n", text)
    text = _BLANK_LINES.sub("\n\n", text)
    return _BETWEEN_TAGS.sub("><", text)


def normalize(text: str) -> str:
    """Normalize encoding and whitespace of a storage-format document.

    Pure and idempotent: ``normalize(normalize(x)) == normalize(x)``.

    Args:
        text: Raw document text, possibly wrapped in a code fence.

    Returns:
        The normalized document.
    """
    if not text:
        return ""

    original_length = len(text)

    text = strip_code_fences(text.strip())
    text = strip_control_characters(text)
    text = repair_mojibake(text)
    text = text.replace("\u00a0", " ")
    text = _LINE_BREAKS.sub("\n", text)
    text = escape_bare_ampersands(text)
    text = collapse_whitespace(text).strip()

    logger.debug(f"Normalized document: {original_length} -> {len(text)} chars")
    return text
