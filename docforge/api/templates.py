"""Template API routes.

Handles placeholder analysis, template cloning from the backend, section
filling and AI generation.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from docforge.api.deps import get_pipeline, get_section_injector, get_template_analyzer
from docforge.api.schemas import (
    AnalyzeTemplateRequest,
    CloneTemplateRequest,
    CloneTemplateResponse,
    FillTemplateRequest,
    FillTemplateResponse,
    GenerateDocumentRequest,
    GenerateDocumentResponse,
    TemplateAnalysisResponse,
)
from docforge.interfaces.backend import BackendError
from docforge.interfaces.publisher import GenerationError
from docforge.interfaces.template import BaseSectionInjector, BaseTemplateAnalyzer
from docforge.pipeline import DocumentPipeline

logger = logging.getLogger(__name__)


router = APIRouter(prefix="/templates", tags=["templates"])


@router.post(
    "/analyze",
    response_model=TemplateAnalysisResponse,
    status_code=status.HTTP_200_OK,
)
async def analyze_template(
    request: AnalyzeTemplateRequest,
    analyzer: BaseTemplateAnalyzer = Depends(get_template_analyzer),
) -> TemplateAnalysisResponse:
    """Analyze template markup for placeholders and empty slots.

    Args:
        request: The template markup.
        analyzer: Template analyzer.

    Returns:
        TemplateAnalysisResponse with counters, marked structure and sections.
    """
    analysis = analyzer.analyze(request.document)
    return TemplateAnalysisResponse.model_validate(analysis)


@router.post(
    "/clone",
    response_model=CloneTemplateResponse,
    status_code=status.HTTP_200_OK,
)
async def clone_template(
    request: CloneTemplateRequest,
    pipeline: DocumentPipeline = Depends(get_pipeline),
) -> CloneTemplateResponse:
    """Fetch a template page and analyze it.

    Raises:
        HTTPException: 400 if the URL holds no page ID, 502 if the backend fails.
    """
    try:
        logger.info(f"Cloning template: {request.template_url}")
        cloned = await pipeline.clone_template(request.template_url)

        return CloneTemplateResponse(
            page_id=cloned.page.page_id,
            title=cloned.page.title,
            original_storage_format=cloned.page.storage_body,
            analysis=TemplateAnalysisResponse.model_validate(cloned.analysis),
        )

    except (ValueError, BackendError):
        raise
    except Exception as e:
        logger.error(f"Template clone failed: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Template clone failed: {str(e)}",
        ) from e


@router.post(
    "/fill",
    response_model=FillTemplateResponse,
    status_code=status.HTTP_200_OK,
)
async def fill_template(
    request: FillTemplateRequest,
    analyzer: BaseTemplateAnalyzer = Depends(get_template_analyzer),
    injector: BaseSectionInjector = Depends(get_section_injector),
) -> FillTemplateResponse:
    """Replace ``{{name}}`` placeholders with the given content.

    Content is shaped by where each placeholder sits: table rows inside
    tables, list items inside lists, light Markdown elsewhere.
    """
    sections = [
        s for s in analyzer.find_sections(request.document)
        if s.placeholder_text.startswith("{{")
    ]
    document = injector.fill_sections(request.document, sections, request.values)
    filled = list(dict.fromkeys(s.id for s in sections if s.id in request.values))

    logger.info(f"Filled {len(filled)} placeholder(s)")
    return FillTemplateResponse(document=document, filled=filled)


@router.post(
    "/generate",
    response_model=GenerateDocumentResponse,
    status_code=status.HTTP_200_OK,
)
async def generate_document(
    request: GenerateDocumentRequest,
    pipeline: DocumentPipeline = Depends(get_pipeline),
) -> GenerateDocumentResponse:
    """Clone a template page and have the generation service fill it.

    Raises:
        HTTPException: 400 on invalid input, 502 if the backend or
            generation service fails.
    """
    try:
        cloned = await pipeline.clone_template(request.template_url)
        generated = await pipeline.generate(
            cloned,
            ba_content=request.ba_content,
            instructions=request.instructions,
            additional_prompt=request.additional_prompt,
            selected_model=request.selected_model,
        )

        return GenerateDocumentResponse(
            document=generated.storage_format,
            suggested_title=generated.suggested_title,
        )

    except (ValueError, BackendError, GenerationError):
        raise
    except Exception as e:
        logger.error(f"Document generation failed: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Document generation failed: {str(e)}",
        ) from e
