"""Concrete strategy implementations."""

from docforge.strategies.backends import (
    ConfluenceClient,
    GenerationApiFiller,
)
from docforge.strategies.publishing import (
    BatchPublisher,
)
from docforge.strategies.renderers import (
    DiagramRenderer,
    KrokiEngine,
    MermaidCliEngine,
)
from docforge.strategies.template_engine import (
    PlaceholderAnalyzer,
    SectionInjector,
)

__all__ = [
    "ConfluenceClient",
    "GenerationApiFiller",
    "BatchPublisher",
    "DiagramRenderer",
    "KrokiEngine",
    "MermaidCliEngine",
    "PlaceholderAnalyzer",
    "SectionInjector",
]
