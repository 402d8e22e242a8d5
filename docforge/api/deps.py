"""FastAPI dependencies for dependency injection.

Provides the component factory and the pipeline built from it.
"""

import logging

from fastapi import Depends

from docforge.core.factory import ComponentFactory, get_factory
from docforge.interfaces.template import BaseSectionInjector, BaseTemplateAnalyzer
from docforge.pipeline import DocumentPipeline

logger = logging.getLogger(__name__)


def get_component_factory() -> ComponentFactory:
    return get_factory()


def get_template_analyzer(
    factory: ComponentFactory = Depends(get_component_factory),
) -> BaseTemplateAnalyzer:
    return factory.get_template_analyzer()


def get_section_injector(
    factory: ComponentFactory = Depends(get_component_factory),
) -> BaseSectionInjector:
    return factory.get_section_injector()


def get_pipeline(
    factory: ComponentFactory = Depends(get_component_factory),
) -> DocumentPipeline:
    """Build the document pipeline from the factory's components.

    Args:
        factory: Component factory.

    Returns:
        A DocumentPipeline sharing the factory's cached components.
    """
    return DocumentPipeline(
        backend=factory.get_backend(),
        analyzer=factory.get_template_analyzer(),
        publisher=factory.get_publisher(),
        filler=factory.get_content_filler(),
        selected_model=factory.settings.selected_model,
    )
