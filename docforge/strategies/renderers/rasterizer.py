"""SVG rasterizer.

Draws SVG markup onto a white offscreen canvas and exports it as a
base64 PNG. CairoSVG does the drawing and Pillow holds the canvas.
"""

import base64
import io
import logging
import re
import xml.etree.ElementTree as ET

from PIL import Image

from docforge.interfaces.diagram import DiagramRenderError

logger = logging.getLogger(__name__)


DEFAULT_WIDTH = 800
DEFAULT_HEIGHT = 600

_PIXEL_LENGTH = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*(?:px)?\s*$")


class OffscreenCanvas:
    """An in-memory RGBA drawing surface.

    A new canvas is created for every rasterization; canvases are never
    shared between renders.
    """

    def __init__(self, width: int, height: int) -> None:
        self.width = width
        self.height = height
        self.image = Image.new("RGBA", (width, height), (0, 0, 0, 0))

    def fill(self, color: str) -> None:
        self.image.paste(Image.new("RGBA", self.image.size, color))

    def draw_image(self, image: Image.Image) -> None:
        layer = image.convert("RGBA")
        self.image.paste(layer, (0, 0), layer)

    def to_data_url(self, mime_type: str = "image/png") -> str:
        buffer = io.BytesIO()
        self.image.save(buffer, format=mime_type.split("/")[-1].upper())
        encoded = base64.b64encode(buffer.getvalue()).decode("ascii")
        return f"data:{mime_type};base64,{encoded}"


def _parse_length(value: str | None) -> float | None:
    if not value:
        return None
    match = _PIXEL_LENGTH.match(value)
    if not match:
        return None
    length = float(match.group(1))
    return length if length > 0 else None


def natural_size(
    svg: str,
    default_width: int = DEFAULT_WIDTH,
    default_height: int = DEFAULT_HEIGHT,
) -> tuple[int, int]:
    """Return the pixel size an SVG declares, or the default size.

    Explicit ``width``/``height`` win; otherwise the ``viewBox`` extent
    is used.
    """
    try:
        root = ET.fromstring(svg)
    except ET.ParseError:
        return default_width, default_height

    width = _parse_length(root.get("width"))
    height = _parse_length(root.get("height"))
    if width and height:
        return round(width), round(height)

    view_box = root.get("viewBox")
    if view_box:
        parts = view_box.replace(",", " ").split()
        if len(parts) == 4:
            try:
                vb_width, vb_height = float(parts[2]), float(parts[3])
            except ValueError:
                vb_width = vb_height = 0.0
            if vb_width > 0 and vb_height > 0:
                return round(vb_width), round(vb_height)

    return default_width, default_height


def rasterize(
    svg: str,
    default_width: int = DEFAULT_WIDTH,
    default_height: int = DEFAULT_HEIGHT,
) -> str:
    """Rasterize SVG markup to a base64 PNG on a white background.

    Args:
        svg: SVG markup.
        default_width: Canvas width when the SVG declares no size.
        default_height: Canvas height when the SVG declares no size.

    Returns:
        Base64 PNG data without the ``data:`` URI prefix.

    Raises:
        DiagramRenderError: If the SVG cannot be drawn.
    """
    # cairosvg loads the native cairo library on import
    import cairosvg

    width, height = natural_size(svg, default_width, default_height)

    try:
        png_bytes = cairosvg.svg2png(
            bytestring=svg.encode("utf-8"),
            output_width=width,
            output_height=height,
        )
        drawn = Image.open(io.BytesIO(png_bytes))
    except Exception as e:
        raise DiagramRenderError(f"SVG rasterization failed: {e}") from e

    canvas = OffscreenCanvas(width, height)
    canvas.fill("white")
    canvas.draw_image(drawn)

    logger.debug(f"Rasterized SVG at {width}x{height}")
    return canvas.to_data_url("image/png").split(",", 1)[1]
