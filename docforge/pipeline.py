"""Document pipeline orchestration.

Ties the strategies together into the two flows the service offers:
cloning and filling a template, and publishing a generated document
together with its diagrams.
"""

import logging
from dataclasses import dataclass, field

from docforge.interfaces.backend import BaseContentBackend, CreatedPage, PageContent
from docforge.interfaces.publisher import (
    BaseContentFiller,
    BasePublisher,
    BatchResult,
    GeneratedDocument,
)
from docforge.interfaces.template import (
    BaseTemplateAnalyzer,
    DocumentValidationError,
    TemplateAnalysis,
)
from docforge.strategies.backends.confluence import extract_page_id
from docforge.strategies.markup import extract_diagrams, normalize, rewrite_macros, sanitize
from docforge.strategies.template_engine.models import FillRequest

logger = logging.getLogger(__name__)


def prepare_document(document: str) -> str:
    """Turn a generated document into storage markup ready for page creation.

    Normalizes encoding, reconciles tags and rewrites structured macros to
    the canonical diagram macro. If reconciliation fails unexpectedly the
    normalized text is used as is.

    Raises:
        DocumentValidationError: If the document is empty.
    """
    if not document or not document.strip():
        raise DocumentValidationError("Document content is empty")

    normalized = normalize(document)
    try:
        reconciled = sanitize(normalized)
    except Exception as e:
        logger.error(f"Tag reconciliation failed, using normalized text: {e}", exc_info=True)
        reconciled = normalized

    prepared = rewrite_macros(reconciled)
    logger.info(f"Prepared document: {len(document)} -> {len(prepared)} chars")
    return prepared


@dataclass(frozen=True)
class ClonedTemplate:
    """A template page together with its analysis."""

    page: PageContent
    analysis: TemplateAnalysis


@dataclass
class PublishReport:
    """Result of publishing a document and its diagrams."""

    page: CreatedPage
    diagrams: BatchResult = field(default_factory=BatchResult)

    def summary(self) -> str:
        lines = [f"Page created: {self.page.title} (ID {self.page.page_id})"]
        if self.diagrams.total:
            lines.append(
                f"Diagrams: {self.diagrams.succeeded}/{self.diagrams.total} saved successfully"
            )
            lines.extend(self.diagrams.errors)
        return "\n".join(lines)


class DocumentPipeline:
    """Runs the clone, generate and publish flows against one backend."""

    def __init__(
        self,
        backend: BaseContentBackend,
        analyzer: BaseTemplateAnalyzer,
        publisher: BasePublisher,
        filler: BaseContentFiller | None = None,
        selected_model: str = "sonar-pro",
    ) -> None:
        self._backend = backend
        self._analyzer = analyzer
        self._publisher = publisher
        self._filler = filler
        self._selected_model = selected_model

    async def clone_template(self, page_ref: str) -> ClonedTemplate:
        """Fetch a template page by URL or ID and analyze it.

        Raises:
            ValueError: If no page ID can be found in ``page_ref``.
            BackendError: If the page cannot be fetched.
        """
        if not page_ref or not page_ref.strip():
            raise ValueError("Template URL is required")

        page_id = extract_page_id(page_ref)
        if not page_id:
            raise ValueError(f"No page ID found in template reference: {page_ref}")

        page = await self._backend.fetch_page(page_id)
        analysis = self._analyzer.analyze(page.storage_body)
        logger.info(
            f"Cloned template {page_id}: {analysis.placeholder_count} placeholder(s), "
            f"{analysis.empty_paragraphs + analysis.empty_table_cells} empty slot(s)"
        )
        return ClonedTemplate(page=page, analysis=analysis)

    async def generate(
        self,
        template: ClonedTemplate,
        ba_content: str,
        instructions: str = "",
        additional_prompt: str = "",
        selected_model: str | None = None,
    ) -> GeneratedDocument:
        """Ask the content filler to fill a cloned template.

        Raises:
            DocumentValidationError: If ``ba_content`` is empty.
            RuntimeError: If no content filler is configured.
            GenerationError: If generation fails.
        """
        if self._filler is None:
            raise RuntimeError("No content filler configured")
        if not ba_content or not ba_content.strip():
            raise DocumentValidationError("Business analysis content is empty")

        request = FillRequest(
            ba_content=ba_content,
            template_structure=template.analysis.structure,
            original_storage_format=template.page.storage_body,
            instructions=instructions,
            additional_prompt=additional_prompt,
            placeholders=template.analysis.placeholders,
            selected_model=selected_model or self._selected_model,
        )
        return await self._filler.fill(request)

    async def publish(
        self,
        title: str,
        document: str,
        space_key: str,
        parent_id: str | None = None,
    ) -> PublishReport:
        """Create a page from a generated document and upload its diagrams.

        Diagrams are extracted from the document as given, before macro
        rewriting replaces their sources.

        Raises:
            DocumentValidationError: If the document is empty.
            ValueError: If ``space_key`` is empty.
            BackendError: If the page cannot be created.
        """
        if not space_key:
            raise ValueError("Space key is required")

        prepared = prepare_document(document)
        page = await self._backend.create_page(title, prepared, space_key, parent_id)

        records = extract_diagrams(document)
        if not records:
            return PublishReport(page=page)

        diagrams = await self._publisher.publish_all(records, page.page_id)
        report = PublishReport(page=page, diagrams=diagrams)
        logger.info(report.summary())
        return report
