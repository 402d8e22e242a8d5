"""Document API routes.

Handles preparation of generated documents and publishing them, with
their diagrams, as new pages.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from docforge.api.deps import get_pipeline
from docforge.api.schemas import (
    DiagramSchema,
    PrepareDocumentRequest,
    PrepareDocumentResponse,
    PublishDocumentRequest,
    PublishDocumentResponse,
)
from docforge.interfaces.backend import BackendError
from docforge.pipeline import DocumentPipeline, prepare_document
from docforge.strategies.markup import extract_diagrams

logger = logging.getLogger(__name__)


router = APIRouter(prefix="/documents", tags=["documents"])


@router.post(
    "/prepare",
    response_model=PrepareDocumentResponse,
    status_code=status.HTTP_200_OK,
)
async def prepare(request: PrepareDocumentRequest) -> PrepareDocumentResponse:
    """Preview the markup and diagrams a publish would produce.

    Raises:
        HTTPException: 400 if the document is empty.
    """
    prepared = prepare_document(request.document)
    diagrams = extract_diagrams(request.document)

    return PrepareDocumentResponse(
        document=prepared,
        diagrams=[DiagramSchema.model_validate(d) for d in diagrams],
    )


@router.post(
    "/publish",
    response_model=PublishDocumentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def publish(
    request: PublishDocumentRequest,
    pipeline: DocumentPipeline = Depends(get_pipeline),
) -> PublishDocumentResponse:
    """Create a page from a generated document and upload its diagrams.

    Individual diagram failures are reported in ``errors``; they do not
    fail the request.

    Raises:
        HTTPException: 400 on invalid input, 502 if page creation fails.
    """
    try:
        logger.info(f"Publishing document to space {request.space_key}: {request.title!r}")
        report = await pipeline.publish(
            title=request.title,
            document=request.document,
            space_key=request.space_key,
            parent_id=request.parent_id,
        )

        return PublishDocumentResponse(
            page_id=report.page.page_id,
            title=report.page.title,
            web_url=report.page.web_url,
            diagrams_succeeded=report.diagrams.succeeded,
            diagrams_total=report.diagrams.total,
            errors=report.diagrams.errors,
            summary=report.summary(),
        )

    except (ValueError, BackendError):
        raise
    except Exception as e:
        logger.error(f"Document publish failed: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Document publish failed: {str(e)}",
        ) from e
