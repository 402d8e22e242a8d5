"""Publishing and content-filling interfaces."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from docforge.interfaces.diagram import DiagramRecord


@dataclass
class BatchResult:
    """Outcome of one publish run.

    Attributes:
        succeeded: Number of diagrams uploaded.
        total: Number of diagrams handed to the run.
        errors: One message per failed diagram.
    """

    succeeded: int = 0
    total: int = 0
    errors: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class GeneratedDocument:
    """A document produced by the content generator."""

    storage_format: str
    suggested_title: str | None = None


class BasePublisher(ABC):
    """Abstract base class for diagram publishing strategies."""

    @abstractmethod
    async def publish_all(
        self, records: list[DiagramRecord], target_id: str
    ) -> BatchResult:
        """Render and upload every record to the target page.

        Args:
            records: Diagrams extracted from the original document.
            target_id: Page the diagrams are attached to.

        Returns:
            A BatchResult. Individual failures are recorded, not raised.

        Raises:
            ValueError: If target_id is empty.
        """


class BaseContentFiller(ABC):
    """Abstract base class for AI content-fill strategies."""

    @abstractmethod
    async def fill(self, request: Any) -> GeneratedDocument:
        """Generate a filled storage-format document for the request.

        Raises:
            GenerationError: If the fill job fails or times out.
        """


class GenerationError(Exception):
    """Exception raised when AI content generation fails."""

    pass
