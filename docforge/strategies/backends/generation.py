"""AI document generation client.

Submits a fill job to the generation service and polls it until the
filled storage-format document is ready.
"""

import asyncio
import logging
from typing import Any

import httpx

from docforge.interfaces.publisher import BaseContentFiller, GeneratedDocument, GenerationError
from docforge.strategies.template_engine.models import FillRequest

logger = logging.getLogger(__name__)


class GenerationApiFiller(BaseContentFiller):
    """Job-based client for the document generation service.

    Attributes:
        base_url: Service root, e.g. ``http://localhost:5001``.
        poll_interval: Seconds between two status checks.
        max_attempts: Status checks before giving up.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:5001",
        poll_interval: float = 10.0,
        max_attempts: int = 20,
        timeout: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._poll_interval = poll_interval
        self._max_attempts = max(1, max_attempts)
        self._timeout = timeout
        self._transport = transport

    async def fill(self, request: FillRequest) -> GeneratedDocument:
        """Run one generation job to completion.

        Args:
            request: Template, business content and generation options.

        Returns:
            The generated document and its suggested title.

        Raises:
            GenerationError: If the job cannot be started, fails, or is
                still running after ``max_attempts`` checks.
        """
        async with httpx.AsyncClient(
            base_url=self._base_url, timeout=self._timeout, transport=self._transport
        ) as client:
            job_id = await self._start_job(client, request)
            await self._wait_for_job(client, job_id)
            return await self._fetch_result(client, job_id)

    async def _get_json(
        self, client: httpx.AsyncClient, method: str, path: str, **kwargs: Any
    ) -> dict[str, Any]:
        try:
            response = await client.request(method, path, **kwargs)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPError as e:
            raise GenerationError(f"Generation service request {path} failed: {e}") from e
        except ValueError as e:
            raise GenerationError(f"Generation service returned invalid JSON from {path}") from e

        if not isinstance(data, dict):
            raise GenerationError(f"Unexpected response from {path}: {data!r}")
        return data

    async def _start_job(self, client: httpx.AsyncClient, request: FillRequest) -> str:
        logger.info(
            f"Submitting generation job: ba_content={len(request.ba_content)} chars, "
            f"placeholders={len(request.placeholders)}, model={request.selected_model}"
        )
        data = await self._get_json(
            client, "POST", "/api/generate-full-confluence-doc", json=request.to_payload()
        )
        job_id = data.get("job_id")
        if not job_id:
            raise GenerationError(data.get("error") or "Generation service returned no job_id")
        logger.info(f"Generation job started: {job_id}")
        return str(job_id)

    async def _wait_for_job(self, client: httpx.AsyncClient, job_id: str) -> None:
        for attempt in range(1, self._max_attempts + 1):
            await asyncio.sleep(self._poll_interval)

            data = await self._get_json(
                client, "GET", "/api/generate-status", params={"job_id": job_id}
            )
            status = data.get("status")
            if data.get("progress_message"):
                logger.info(f"Job {job_id} progress: {data['progress_message']}")

            if status == "done":
                return
            if status == "error":
                raise GenerationError(data.get("error") or f"Generation job {job_id} failed")

            logger.debug(f"Job {job_id} status={status} (attempt {attempt}/{self._max_attempts})")

        raise GenerationError(
            f"Generation job {job_id} did not finish after {self._max_attempts} checks"
        )

    async def _fetch_result(self, client: httpx.AsyncClient, job_id: str) -> GeneratedDocument:
        data = await self._get_json(
            client, "GET", "/api/generate-result", params={"job_id": job_id}
        )
        result = data.get("result") or {}
        if isinstance(result, str):
            return GeneratedDocument(storage_format=result)
        if not result.get("success", True):
            raise GenerationError(result.get("error") or "Document generation failed")

        storage_format = result.get("full_storage_format") or ""
        if not storage_format:
            raise GenerationError(f"Generation job {job_id} returned an empty document")

        logger.info(f"Generation job {job_id} finished: {len(storage_format)} chars")
        return GeneratedDocument(
            storage_format=storage_format,
            suggested_title=result.get("suggested_title"),
        )
