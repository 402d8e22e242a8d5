"""FastAPI routers and dependencies."""

from docforge.api.deps import (
    get_component_factory,
    get_pipeline,
    get_section_injector,
    get_template_analyzer,
)
from docforge.api.documents import router as documents_router
from docforge.api.templates import router as templates_router

__all__ = [
    "documents_router",
    "get_component_factory",
    "get_pipeline",
    "get_section_injector",
    "get_template_analyzer",
    "templates_router",
]
