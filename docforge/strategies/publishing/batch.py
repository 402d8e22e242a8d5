"""Batch diagram publisher.

Renders every diagram concurrently, then uploads them one at a time with
a short pause between uploads so the backend is not flooded.
"""

import asyncio
import logging

from docforge.interfaces.backend import BaseContentBackend, DiagramUploadError
from docforge.interfaces.diagram import DiagramRecord
from docforge.interfaces.publisher import BasePublisher, BatchResult
from docforge.strategies.renderers.diagram import DiagramRenderer

logger = logging.getLogger(__name__)


class BatchPublisher(BasePublisher):
    """Publishes diagrams with per-item failure bookkeeping.

    A failed upload is recorded in ``BatchResult.errors`` and the batch
    carries on with the next diagram.
    """

    def __init__(
        self,
        backend: BaseContentBackend,
        renderer: DiagramRenderer,
        upload_delay: float = 0.5,
    ) -> None:
        """Initialize the publisher.

        Args:
            backend: Receives the uploads.
            renderer: Fills in vector and raster images before upload.
            upload_delay: Seconds to wait between two uploads.
        """
        self._backend = backend
        self._renderer = renderer
        self._upload_delay = max(0.0, upload_delay)

    async def publish_all(
        self, records: list[DiagramRecord], target_id: str
    ) -> BatchResult:
        if not target_id:
            raise ValueError("Page ID is required to publish diagrams")

        result = BatchResult(total=len(records))
        if not records:
            return result

        logger.info(f"Publishing {len(records)} diagram(s) to page {target_id}")

        try:
            await asyncio.gather(*(self._renderer.render(record) for record in records))
        except Exception as e:
            # render() already falls back per record; this only guards the batch
            logger.error(f"Error processing diagrams: {e}", exc_info=True)
            result.errors.append(f"Error processing diagrams: {e}")
            return result

        for index, record in enumerate(records):
            if index > 0 and self._upload_delay:
                await asyncio.sleep(self._upload_delay)

            error = await self._upload(record, target_id)
            if error is None:
                result.succeeded += 1
            else:
                result.errors.append(error)

        logger.info(
            f"Diagram publish finished: {result.succeeded}/{result.total} uploaded, "
            f"{len(result.errors)} error(s)"
        )
        return result

    async def _upload(self, record: DiagramRecord, target_id: str) -> str | None:
        try:
            await self._backend.upload_diagram(record, target_id)
        except DiagramUploadError as e:
            logger.warning(f"Upload of {record.filename} rejected: {e}")
            return f"Failed to save diagram {record.filename}: {e}"
        except Exception as e:
            logger.error(f"Upload of {record.filename} failed: {e}", exc_info=True)
            return f"Error saving diagram {record.filename}: {e}"

        logger.debug(f"Uploaded {record.filename}")
        return None
