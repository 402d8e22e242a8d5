"""Template engine strategies.

Implements placeholder analysis and section injection for storage-format
templates.
"""

from docforge.strategies.template_engine.analyzer import PlaceholderAnalyzer
from docforge.strategies.template_engine.injector import SectionInjector
from docforge.strategies.template_engine.models import FillRequest

__all__ = [
    "FillRequest",
    "PlaceholderAnalyzer",
    "SectionInjector",
]
