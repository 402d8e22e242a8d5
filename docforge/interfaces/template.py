"""Template analysis and section injection interfaces.

Defines the placeholder data model and abstract base classes for the
template side of the pipeline.
"""

import enum
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any


class PlaceholderKind(str, enum.Enum):
    """Structural context a placeholder sits in."""

    TEXT = "text"
    TABLE = "table"
    LIST = "list"
    MACRO = "macro"


@dataclass(frozen=True)
class PlaceholderSection:
    """A placeholder token found in a template.

    Attributes:
        id: Inner name of the token (``NAME`` in ``{{NAME}}``).
        kind: Structural context the token was found in.
        placeholder_text: The raw matched token text.
        surrounding_context: Markup window around the token used for classification.
        position: Character offset of the match, used for left-to-right ordering.
    """

    id: str
    kind: PlaceholderKind
    placeholder_text: str
    surrounding_context: str
    position: int


@dataclass(frozen=True)
class TemplateAnalysis:
    """Result of analyzing a template document.

    Attributes:
        structure: Template markup with empty slots replaced by markers.
        empty_paragraphs: Number of empty paragraphs that were marked.
        empty_table_cells: Number of empty table cells that were marked.
        placeholder_count: Raw placeholder matches summed over all spellings.
        total_length: Length of ``structure``.
        sections: Placeholder sections in document order.
        placeholders: Unique placeholder token texts in first-seen order.
    """

    structure: str
    empty_paragraphs: int = 0
    empty_table_cells: int = 0
    placeholder_count: int = 0
    total_length: int = 0
    sections: list[PlaceholderSection] = field(default_factory=list)
    placeholders: list[str] = field(default_factory=list)


class BaseTemplateAnalyzer(ABC):
    """Abstract base class for template analysis strategies."""

    @abstractmethod
    def analyze(self, document: str) -> TemplateAnalysis:
        """Analyze a storage-format template.

        Args:
            document: The template markup.

        Returns:
            A TemplateAnalysis. Never raises for malformed or empty input.
        """

    @abstractmethod
    def find_sections(self, document: str) -> list[PlaceholderSection]:
        """Return every placeholder section ordered by position."""


class BaseSectionInjector(ABC):
    """Abstract base class for placeholder filling strategies."""

    @abstractmethod
    def fill_section(
        self,
        document: str,
        section_id: str,
        content: str,
        kind: PlaceholderKind,
    ) -> str:
        """Replace a placeholder with generated content.

        Args:
            document: The template markup.
            section_id: Inner name of the placeholder to replace.
            content: Generated content for the section.
            kind: Structural context deciding how content is shaped.

        Returns:
            The document with the first matching placeholder replaced.
        """

    def fill_sections(
        self,
        document: str,
        sections: list[PlaceholderSection],
        values: dict[str, Any],
    ) -> str:
        """Fill every section that has a value, in document order."""
        for section in sections:
            if section.id in values:
                document = self.fill_section(
                    document, section.id, str(values[section.id]), section.kind
                )
        return document


class DocumentValidationError(ValueError):
    """Raised when a document is missing or empty."""

    pass
