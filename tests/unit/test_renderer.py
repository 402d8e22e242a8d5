"""Unit tests for diagram rendering."""

import asyncio
import base64
from unittest.mock import AsyncMock, MagicMock

import pytest

from docforge.interfaces.diagram import (
    DiagramRecord,
    DiagramRenderError,
    RenderFailure,
    RenderSuccess,
    coerce_svg,
)
from docforge.strategies.renderers.diagram import PLACEHOLDER_PNG, DiagramRenderer
from docforge.strategies.renderers.rasterizer import OffscreenCanvas, natural_size

SVG = '<svg xmlns="http://www.w3.org/2000/svg" width="40" height="20"><rect width="40" height="20" fill="red"/></svg>'


@pytest.fixture
def record():
    """Create a diagram record."""
    return DiagramRecord(filename="k-tool-diagram-1", macro_id="111", source_code="graph TD; A-->B")


@pytest.fixture
def engine():
    """Create a mock engine that returns bare SVG."""
    mock = MagicMock()
    mock.name = "mock"
    mock.render = AsyncMock(return_value=SVG)
    return mock


class TestCoerceSvg:
    """Test suite for engine output normalization."""

    def test_bare_string(self):
        assert coerce_svg(SVG) == SVG

    def test_mapping(self):
        assert coerce_svg({"svg": SVG, "diagram_id": "111"}) == SVG

    @pytest.mark.parametrize("output", ["", "   ", {"png": "x"}, {"svg": ""}, None, 42])
    def test_invalid_shapes(self, output):
        with pytest.raises(DiagramRenderError):
            coerce_svg(output)


class TestNaturalSize:
    """Test suite for SVG size detection."""

    def test_width_height_attributes(self):
        assert natural_size(SVG) == (40, 20)

    def test_px_units(self):
        svg = '<svg xmlns="http://www.w3.org/2000/svg" width="120px" height="60px"/>'
        assert natural_size(svg) == (120, 60)

    def test_viewbox_fallback(self):
        svg = '<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 300 150"/>'
        assert natural_size(svg) == (300, 150)

    def test_percent_width_uses_viewbox(self):
        svg = '<svg xmlns="http://www.w3.org/2000/svg" width="100%" viewBox="0,0,50,25"/>'
        assert natural_size(svg) == (50, 25)

    def test_default_size(self):
        assert natural_size("<svg/>", 800, 600) == (800, 600)

    def test_unparseable(self):
        assert natural_size("not svg", 10, 20) == (10, 20)


class TestOffscreenCanvas:
    """Test suite for the offscreen canvas."""

    def test_data_url(self):
        canvas = OffscreenCanvas(4, 3)
        canvas.fill("white")
        url = canvas.to_data_url("image/png")

        assert url.startswith("data:image/png;base64,")
        png = base64.b64decode(url.split(",", 1)[1])
        assert png[:8] == b"\x89PNG\r\n\x1a\n"


class TestDiagramRenderer:
    """Test suite for DiagramRenderer."""

    def test_success(self, engine, record):
        """Test that both images are set on success."""
        rasterizer = MagicMock(return_value="cG5n")
        renderer = DiagramRenderer(engine, rasterizer=rasterizer, default_width=640, default_height=480)

        async def run_test():
            return await renderer.render(record)

        result = asyncio.run(run_test())

        assert result is record
        assert record.vector_image == SVG
        assert record.raster_image == "cG5n"
        assert record.render_error is None
        engine.render.assert_awaited_once_with("111", "graph TD; A-->B")
        rasterizer.assert_called_once_with(SVG, 640, 480)

    def test_mapping_output(self, engine, record):
        """Test engines returning a mapping."""
        engine.render.return_value = {"svg": SVG, "diagram_id": "111"}
        renderer = DiagramRenderer(engine, rasterizer=lambda svg, w, h: "cG5n")

        asyncio.run(renderer.render(record))

        assert record.vector_image == SVG

    def test_vector_failure_uses_placeholder(self, engine, record):
        """Test engine errors fall back to the placeholder PNG."""
        engine.render.side_effect = DiagramRenderError("bad syntax")
        rasterizer = MagicMock()
        renderer = DiagramRenderer(engine, rasterizer=rasterizer)

        asyncio.run(renderer.render(record))

        assert record.raster_image == PLACEHOLDER_PNG
        assert record.vector_image is None
        assert record.render_error == "vector: bad syntax"
        rasterizer.assert_not_called()

    def test_invalid_engine_output(self, engine, record):
        """Test an engine returning nothing usable."""
        engine.render.return_value = {"diagram_id": "111"}
        renderer = DiagramRenderer(engine, rasterizer=MagicMock())

        result = asyncio.run(renderer.try_render(record))

        assert isinstance(result, RenderFailure)
        assert result.stage == "vector"

    def test_raster_failure_keeps_svg(self, engine, record):
        """Test rasterizer errors keep the SVG and use the placeholder PNG."""
        rasterizer = MagicMock(side_effect=DiagramRenderError("cairo missing"))
        renderer = DiagramRenderer(engine, rasterizer=rasterizer)

        asyncio.run(renderer.render(record))

        assert record.vector_image == SVG
        assert record.raster_image == PLACEHOLDER_PNG
        assert record.render_error == "raster: cairo missing"

    def test_try_render_leaves_record_untouched(self, engine, record):
        renderer = DiagramRenderer(engine, rasterizer=lambda svg, w, h: "cG5n")

        result = asyncio.run(renderer.try_render(record))

        assert result == RenderSuccess(svg=SVG, png="cG5n")
        assert record.vector_image is None
        assert record.raster_image is None

    def test_placeholder_is_png(self):
        assert base64.b64decode(PLACEHOLDER_PNG)[:8] == b"\x89PNG\r\n\x1a\n"


class TestRasterize:
    """Test suite for the CairoSVG rasterizer."""

    def test_rasterize_svg(self):
        """Test a real rasterization when the cairo library is available."""
        try:
            from docforge.strategies.renderers.rasterizer import rasterize

            encoded = rasterize(SVG)
        except (ImportError, OSError) as e:
            pytest.skip(f"cairo not available: {e}")

        png = base64.b64decode(encoded)
        assert png[:8] == b"\x89PNG\r\n\x1a\n"
        assert not encoded.startswith("data:")
