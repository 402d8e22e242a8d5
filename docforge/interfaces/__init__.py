"""Abstract base classes and data model for the document pipeline."""

from docforge.interfaces.backend import (
    BackendError,
    BaseContentBackend,
    CreatedPage,
    DiagramUploadError,
    PageContent,
)
from docforge.interfaces.diagram import (
    BaseDiagramEngine,
    DiagramRecord,
    DiagramRenderError,
    RenderFailure,
    RenderSuccess,
    coerce_svg,
)
from docforge.interfaces.publisher import (
    BaseContentFiller,
    BasePublisher,
    BatchResult,
    GeneratedDocument,
    GenerationError,
)
from docforge.interfaces.template import (
    BaseSectionInjector,
    BaseTemplateAnalyzer,
    DocumentValidationError,
    PlaceholderKind,
    PlaceholderSection,
    TemplateAnalysis,
)

__all__ = [
    "BackendError",
    "BaseContentBackend",
    "BaseContentFiller",
    "BaseDiagramEngine",
    "BasePublisher",
    "BaseSectionInjector",
    "BaseTemplateAnalyzer",
    "BatchResult",
    "CreatedPage",
    "DiagramRecord",
    "DiagramRenderError",
    "DiagramUploadError",
    "DocumentValidationError",
    "GeneratedDocument",
    "GenerationError",
    "PageContent",
    "PlaceholderKind",
    "PlaceholderSection",
    "RenderFailure",
    "RenderSuccess",
    "TemplateAnalysis",
    "coerce_svg",
]
