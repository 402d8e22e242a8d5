"""Placeholder analyzer strategy.

Scans storage-format templates for placeholder tokens and marks empty
paragraphs and table cells so the content generator knows where text is
expected.
"""

import logging
import re

from docforge.interfaces.template import (
    BaseTemplateAnalyzer,
    PlaceholderKind,
    PlaceholderSection,
    TemplateAnalysis,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Placeholder spellings
# =============================================================================

# The same token can reach us raw, HTML-escaped or JSON-escaped depending on
# which editor last touched the template. Each spelling is counted separately.
PLACEHOLDER_PATTERNS: tuple[re.Pattern, ...] = (
    re.compile(r"<<\s*([^<>]+?)\s*>>"),
    re.compile(r"\{\{\s*([^{}]+?)\s*\}\}"),
    re.compile(r"&lt;&lt;\s*(.+?)\s*&gt;&gt;"),
    re.compile(r"\\u003c\\u003c\s*(.+?)\s*\\u003e\\u003e", re.IGNORECASE),
)

CONTENT_MARKER = "<p><<content_goes_here>></p>"
TABLE_CONTENT_MARKER = "<td><<table_content_goes_here>></td>"

_EMPTY_PARAGRAPH = re.compile(r"<p><br\s*/?></p>")
_EMPTY_TABLE_CELL = re.compile(r"<td[^>]*>\s*</td>")
_WHITESPACE = re.compile(r"\s+")

CONTEXT_WINDOW = 200


class PlaceholderAnalyzer(BaseTemplateAnalyzer):
    """Detects placeholder tokens and empty slots in templates.

    Attributes:
        context_window: Characters inspected on each side of a token when
            classifying its section kind.
    """

    def __init__(self, context_window: int = CONTEXT_WINDOW) -> None:
        self._context_window = context_window

    def analyze(self, document: str) -> TemplateAnalysis:
        """Analyze a template document.

        Placeholder counts are taken from the input before empty slots are
        marked, so the markers themselves are never counted. A token written
        in two spellings is counted twice.

        Args:
            document: Template markup. May be empty.

        Returns:
            A TemplateAnalysis whose ``structure`` has every empty paragraph
            and table cell replaced by a marker.
        """
        if not document:
            return TemplateAnalysis(structure=document or "")

        placeholder_count = sum(
            len(pattern.findall(document)) for pattern in PLACEHOLDER_PATTERNS
        )
        sections = self.find_sections(document)

        structure, empty_paragraphs = _EMPTY_PARAGRAPH.subn(CONTENT_MARKER, document)
        structure, empty_table_cells = _EMPTY_TABLE_CELL.subn(
            TABLE_CONTENT_MARKER, structure
        )
        structure = _WHITESPACE.sub(" ", structure).strip()

        placeholders = list(dict.fromkeys(s.placeholder_text for s in sections))

        logger.info(
            f"Template analyzed: placeholders={placeholder_count}, "
            f"empty_paragraphs={empty_paragraphs}, empty_table_cells={empty_table_cells}"
        )

        return TemplateAnalysis(
            structure=structure,
            empty_paragraphs=empty_paragraphs,
            empty_table_cells=empty_table_cells,
            placeholder_count=placeholder_count,
            total_length=len(structure),
            sections=sections,
            placeholders=placeholders,
        )

    def find_sections(self, document: str) -> list[PlaceholderSection]:
        """Return one section per token match, ordered by position."""
        sections: list[PlaceholderSection] = []

        for pattern in PLACEHOLDER_PATTERNS:
            for match in pattern.finditer(document):
                start = max(0, match.start() - self._context_window)
                end = min(len(document), match.end() + self._context_window)
                context = document[start:end]

                sections.append(
                    PlaceholderSection(
                        id=match.group(1).strip(),
                        kind=self.classify(context),
                        placeholder_text=match.group(0),
                        surrounding_context=context,
                        position=match.start(),
                    )
                )

        sections.sort(key=lambda s: s.position)
        return sections

    @staticmethod
    def classify(context: str) -> PlaceholderKind:
        """Decide the section kind from the markup around a token."""
        if "<table" in context or "<td" in context:
            return PlaceholderKind.TABLE
        if "<ul" in context or "<ol" in context:
            return PlaceholderKind.LIST
        if "<ac:structured-macro" in context:
            return PlaceholderKind.MACRO
        return PlaceholderKind.TEXT

    def extract_placeholders(self, document: str) -> list[str]:
        """Return the unique placeholder names in first-seen order."""
        return list(dict.fromkeys(s.id for s in self.find_sections(document)))
