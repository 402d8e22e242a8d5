"""Diagram data model and rendering engine interface.

The Strategy Pattern lets different diagram engines (HTTP renderers,
local CLIs) be swapped at runtime. Engines are allowed to return either a
bare SVG string or a mapping carrying an ``svg`` key; both are collapsed
into a single shape by ``coerce_svg`` before the renderer sees them.
"""

from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

# Raw return shape of an engine: "<svg ...>" or {"svg": "<svg ...>", ...}
EngineOutput = str | Mapping[str, Any]


@dataclass
class DiagramRecord:
    """A diagram discovered in a document.

    Created by the extractor, filled in by the renderer and read by the
    publisher. This is the one pipeline object that is mutated in place.

    Attributes:
        filename: Upload name, ``k-tool-diagram-<n>``.
        macro_id: Sequential identifier starting at ``"111"``.
        source_code: Diagram description text.
        vector_image: Rendered SVG markup.
        raster_image: Base64-encoded PNG without a data-URI prefix.
        render_error: Why rendering fell back to the placeholder, if it did.
    """

    filename: str
    macro_id: str
    source_code: str
    vector_image: str | None = None
    raster_image: str | None = None
    render_error: str | None = None


@dataclass(frozen=True)
class RenderSuccess:
    """Both images were produced."""

    svg: str
    png: str


@dataclass(frozen=True)
class RenderFailure:
    """Rendering stopped at ``stage`` ("vector" or "raster")."""

    stage: str
    error: str
    svg: str | None = None


RenderResult = RenderSuccess | RenderFailure


class DiagramRenderError(Exception):
    """Exception raised when a diagram cannot be rendered."""

    pass


def coerce_svg(output: EngineOutput) -> str:
    """Normalize an engine return value to SVG markup.

    Args:
        output: A bare SVG string or a mapping with an ``svg`` entry.

    Returns:
        The SVG markup.

    Raises:
        DiagramRenderError: If the value has neither shape.
    """
    match output:
        case str() if output.strip():
            return output
        case Mapping() if isinstance(output.get("svg"), str) and output["svg"].strip():
            return output["svg"]
        case _:
            raise DiagramRenderError(
                f"Invalid SVG result from rendering engine: {type(output).__name__}"
            )


class BaseDiagramEngine(ABC):
    """Abstract base class for diagram rendering engines.

    Example:
        ```python
        class KrokiEngine(BaseDiagramEngine):
            async def render(self, diagram_id: str, source: str) -> EngineOutput:
                # POST source to the renderer
                pass
        ```
    """

    @abstractmethod
    async def render(self, diagram_id: str, source: str) -> EngineOutput:
        """Render diagram source text to SVG.

        Args:
            diagram_id: Identifier for the render, derived from the macro id.
            source: Diagram description text.

        Returns:
            SVG markup, either bare or inside a mapping under ``svg``.

        Raises:
            DiagramRenderError: If the engine rejects the source.
        """

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the engine name."""
