"""Structured macro rewriting and diagram extraction.

``rewrite_macros`` replaces every structured macro, whatever its kind, with
the canonical diagram macro. It must only be applied after
``extract_diagrams`` has read the diagram sources from the same document,
otherwise the sources are lost.

The two functions number independently: the rewriter counts every macro,
the extractor counts only diagram macros with non-empty code. Numbering
lines up when the document holds nothing but non-empty diagram macros.
"""

import logging
import re

from docforge.interfaces.diagram import DiagramRecord

logger = logging.getLogger(__name__)


DIAGRAM_FILENAME_PREFIX = "k-tool-diagram-"
MACRO_ID_BASE = 110

_STRUCTURED_MACRO = re.compile(r"<ac:structured-macro[^>]*>[\s\S]*?</ac:structured-macro>")

_DIAGRAM_MACRO = re.compile(
    r'<ac:structured-macro[^>]*ac:name="mermaid"[^>]*>[\s\S]*?'
    r'<ac:parameter[^>]*ac:name="code"[^>]*>'
    r"(?:<!\[CDATA\[([\s\S]*?)\]\]>|([\s\S]*?))"
    r"</ac:parameter>[\s\S]*?</ac:structured-macro>"
)

CANONICAL_MACRO_TEMPLATE = (
    '<ac:structured-macro ac:name="mermaid-cloud" ac:schema-version="1" '
    'ac:macro-id="{macro_id}">\n'
    '<ac:parameter ac:name="toolbar">bottom</ac:parameter>\n'
    '<ac:parameter ac:name="filename">{filename}</ac:parameter>\n'
    '<ac:parameter ac:name="format">svg</ac:parameter>\n'
    '<ac:parameter ac:name="zoom">fit</ac:parameter>\n'
    '<ac:parameter ac:name="revision">1</ac:parameter>\n'
    "</ac:structured-macro>"
)


def diagram_filename(sequence: int) -> str:
    return f"{DIAGRAM_FILENAME_PREFIX}{sequence}"


def diagram_macro_id(sequence: int) -> str:
    return str(MACRO_ID_BASE + sequence)


def canonical_macro(sequence: int) -> str:
    """Build the canonical diagram macro for the n-th diagram (1-based)."""
    return CANONICAL_MACRO_TEMPLATE.format(
        macro_id=diagram_macro_id(sequence),
        filename=diagram_filename(sequence),
    )


def rewrite_macros(document: str) -> str:
    """Replace every structured macro with the canonical diagram macro.

    Args:
        document: Storage-format markup.

    Returns:
        The document with the n-th macro replaced by ``canonical_macro(n)``.
    """
    sequence = 0

    def _replace(_match: re.Match) -> str:
        nonlocal sequence
        sequence += 1
        return canonical_macro(sequence)

    rewritten = _STRUCTURED_MACRO.sub(_replace, document)
    if sequence:
        logger.info(f"Rewrote {sequence} structured macro(s)")
    return rewritten


def extract_diagrams(document: str) -> list[DiagramRecord]:
    """Collect the source code of every diagram macro in document order.

    Macros whose code parameter is empty are skipped and do not consume a
    sequence number.

    Args:
        document: Storage-format markup, before ``rewrite_macros``.

    Returns:
        One DiagramRecord per non-empty diagram, vector and raster unset.
    """
    records: list[DiagramRecord] = []

    for match in _DIAGRAM_MACRO.finditer(document):
        cdata, plain = match.group(1), match.group(2)
        code = (cdata if cdata is not None else plain or "").strip()
        if not code:
            logger.debug(f"Skipping empty diagram macro at offset {match.start()}")
            continue

        sequence = len(records) + 1
        records.append(
            DiagramRecord(
                filename=diagram_filename(sequence),
                macro_id=diagram_macro_id(sequence),
                source_code=code,
            )
        )

    logger.info(f"Extracted {len(records)} diagram(s)")
    return records
