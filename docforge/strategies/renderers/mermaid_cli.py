"""Mermaid CLI diagram engine.

Runs ``mmdc`` (``npm install -g @mermaid-js/mermaid-cli``) in a
subprocess against a temporary input file.
"""

import asyncio
import logging
import tempfile
from pathlib import Path

from docforge.interfaces.diagram import BaseDiagramEngine, DiagramRenderError, EngineOutput

logger = logging.getLogger(__name__)


class MermaidCliEngine(BaseDiagramEngine):
    """Renders Mermaid source with the local mermaid-cli.

    Returns a mapping ``{"svg": ..., "diagram_id": ...}`` rather than a
    bare string.
    """

    def __init__(self, mmdc_path: str = "mmdc", timeout: float = 30.0) -> None:
        self._mmdc_path = mmdc_path
        self._timeout = timeout

    @property
    def name(self) -> str:
        return "mmdc"

    async def render(self, diagram_id: str, source: str) -> EngineOutput:
        with tempfile.TemporaryDirectory(prefix="docforge-mmdc-") as workdir:
            input_path = Path(workdir) / f"{diagram_id}.mmd"
            output_path = Path(workdir) / f"{diagram_id}.svg"
            input_path.write_text(source, encoding="utf-8")

            cmd = [
                self._mmdc_path,
                "-i", str(input_path),
                "-o", str(output_path),
                "-b", "transparent",
            ]
            logger.debug(f"Running mermaid-cli for diagram {diagram_id}")

            try:
                process = await asyncio.create_subprocess_exec(
                    *cmd,
                    stdout=asyncio.subprocess.PIPE,
                    stderr=asyncio.subprocess.PIPE,
                )
            except FileNotFoundError as e:
                raise DiagramRenderError(f"mermaid-cli not found: {self._mmdc_path}") from e

            try:
                _, stderr = await asyncio.wait_for(process.communicate(), timeout=self._timeout)
            except asyncio.TimeoutError as e:
                process.kill()
                await process.wait()
                raise DiagramRenderError(
                    f"mermaid-cli timed out after {self._timeout}s for diagram {diagram_id}"
                ) from e

            if process.returncode != 0 or not output_path.exists():
                detail = stderr.decode("utf-8", errors="ignore").strip()[:500]
                raise DiagramRenderError(
                    f"mermaid-cli failed with exit code {process.returncode}: {detail}"
                )

            return {
                "svg": output_path.read_text(encoding="utf-8"),
                "diagram_id": diagram_id,
            }
