"""Diagram renderer.

Turns a DiagramRecord's source into an SVG and a PNG. Failures never
propagate out of ``render``: the record gets a transparent placeholder
PNG so the publisher always has something to upload.
"""

import asyncio
import logging
from collections.abc import Callable

from docforge.interfaces.diagram import (
    BaseDiagramEngine,
    DiagramRecord,
    RenderFailure,
    RenderResult,
    RenderSuccess,
    coerce_svg,
)
from docforge.strategies.renderers.rasterizer import (
    DEFAULT_HEIGHT,
    DEFAULT_WIDTH,
    rasterize,
)

logger = logging.getLogger(__name__)


# 1x1 transparent PNG
PLACEHOLDER_PNG = (
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNkYPhfDwAChwGA60e6kgAAAABJRU5ErkJggg=="
)

Rasterizer = Callable[[str, int, int], str]


class DiagramRenderer:
    """Renders diagrams with a pluggable engine and rasterizer.

    Attributes:
        engine: Produces SVG from diagram source.
        rasterizer: Converts SVG to base64 PNG. Runs in a worker thread.
    """

    def __init__(
        self,
        engine: BaseDiagramEngine,
        rasterizer: Rasterizer = rasterize,
        default_width: int = DEFAULT_WIDTH,
        default_height: int = DEFAULT_HEIGHT,
    ) -> None:
        self._engine = engine
        self._rasterizer = rasterizer
        self._default_width = default_width
        self._default_height = default_height

    @property
    def engine(self) -> BaseDiagramEngine:
        return self._engine

    async def try_render(self, record: DiagramRecord) -> RenderResult:
        """Render a record without touching it.

        Returns:
            RenderSuccess with both images, or RenderFailure naming the
            stage that failed and keeping the SVG if it was produced.
        """
        try:
            output = await self._engine.render(record.macro_id, record.source_code)
            svg = coerce_svg(output)
        except Exception as e:
            return RenderFailure(stage="vector", error=str(e) or type(e).__name__)

        try:
            png = await asyncio.to_thread(
                self._rasterizer, svg, self._default_width, self._default_height
            )
        except Exception as e:
            return RenderFailure(stage="raster", error=str(e) or type(e).__name__, svg=svg)

        return RenderSuccess(svg=svg, png=png)

    async def render(self, record: DiagramRecord) -> DiagramRecord:
        """Fill in the record's images, falling back to the placeholder PNG.

        Args:
            record: Diagram from the extractor. Mutated in place.

        Returns:
            The same record.
        """
        result = await self.try_render(record)

        match result:
            case RenderSuccess(svg, png):
                record.vector_image = svg
                record.raster_image = png
                record.render_error = None
                logger.info(f"Rendered {record.filename} with {self._engine.name}")
            case RenderFailure(stage, error, svg):
                record.vector_image = svg
                record.raster_image = PLACEHOLDER_PNG
                record.render_error = f"{stage}: {error}"
                logger.warning(
                    f"Rendering {record.filename} failed at {stage} stage, "
                    f"using placeholder image: {error}"
                )

        return record
