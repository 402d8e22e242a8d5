"""Kroki HTTP diagram engine.

POSTs diagram source to a Kroki server and returns the SVG body.
"""

import logging

import httpx

from docforge.interfaces.diagram import BaseDiagramEngine, DiagramRenderError, EngineOutput

logger = logging.getLogger(__name__)


class KrokiEngine(BaseDiagramEngine):
    """Renders Mermaid source through the Kroki ``/mermaid/svg`` endpoint.

    Attributes:
        base_url: Kroki server root, e.g. ``https://kroki.io``.
        timeout: Request timeout in seconds.
    """

    def __init__(
        self,
        base_url: str = "https://kroki.io",
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._client = client

    @property
    def name(self) -> str:
        return "kroki"

    async def render(self, diagram_id: str, source: str) -> EngineOutput:
        url = f"{self._base_url}/mermaid/svg"
        logger.debug(f"Rendering diagram {diagram_id} via Kroki: {url}")

        try:
            if self._client is not None:
                response = await self._post(self._client, url, source)
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    response = await self._post(client, url, source)
        except httpx.HTTPError as e:
            raise DiagramRenderError(f"Kroki request failed: {e}") from e

        if response.status_code != 200:
            detail = response.text[:500] if response.text else f"HTTP {response.status_code}"
            raise DiagramRenderError(f"Kroki render failed: {detail}")

        return response.text

    async def _post(self, client: httpx.AsyncClient, url: str, source: str) -> httpx.Response:
        return await client.post(
            url,
            content=source.encode("utf-8"),
            headers={"Content-Type": "text/plain"},
        )
