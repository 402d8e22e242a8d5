"""Diagram rendering strategies."""

from docforge.strategies.renderers.diagram import PLACEHOLDER_PNG, DiagramRenderer
from docforge.strategies.renderers.kroki import KrokiEngine
from docforge.strategies.renderers.mermaid_cli import MermaidCliEngine
from docforge.strategies.renderers.rasterizer import OffscreenCanvas, rasterize

__all__ = [
    "DiagramRenderer",
    "KrokiEngine",
    "MermaidCliEngine",
    "OffscreenCanvas",
    "PLACEHOLDER_PNG",
    "rasterize",
]
