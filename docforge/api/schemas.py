"""API request and response schemas.

Pydantic v2 models for API serialization/deserialization.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from docforge.interfaces.template import PlaceholderKind


class ErrorResponse(BaseModel):
    """Standard error response."""

    detail: str = Field(description="Error message")
    error_code: str | None = Field(default=None, description="Application-specific error code")
    extra: dict[str, Any] | None = Field(default=None, description="Additional error context")


# =============================================================================
# Template Schemas
# =============================================================================


class AnalyzeTemplateRequest(BaseModel):
    """Request schema for analyzing template markup."""

    document: str = Field(description="Template in storage format")


class PlaceholderSectionSchema(BaseModel):
    """A placeholder found in a template."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    kind: PlaceholderKind
    placeholder_text: str
    position: int


class TemplateAnalysisResponse(BaseModel):
    """Response for template analysis."""

    model_config = ConfigDict(from_attributes=True)

    structure: str = Field(description="Template with empty slots marked")
    empty_paragraphs: int = 0
    empty_table_cells: int = 0
    placeholder_count: int = 0
    total_length: int = 0
    sections: list[PlaceholderSectionSchema] = Field(default_factory=list)
    placeholders: list[str] = Field(default_factory=list)


class CloneTemplateRequest(BaseModel):
    """Request schema for cloning a template page."""

    template_url: str = Field(min_length=1, description="Template page URL or page ID")


class CloneTemplateResponse(BaseModel):
    """Response for a cloned template."""

    page_id: str
    title: str
    original_storage_format: str
    analysis: TemplateAnalysisResponse


class FillTemplateRequest(BaseModel):
    """Request schema for filling ``{{name}}`` placeholders with given values."""

    document: str = Field(description="Template in storage format")
    values: dict[str, str] = Field(description="Content per placeholder name")


class FillTemplateResponse(BaseModel):
    document: str
    filled: list[str] = Field(description="Placeholder names that received content")


class GenerateDocumentRequest(BaseModel):
    """Request schema for AI generation from a template page."""

    template_url: str = Field(min_length=1, description="Template page URL or page ID")
    ba_content: str = Field(min_length=1, description="Business analysis content")
    instructions: str = ""
    additional_prompt: str = ""
    selected_model: str | None = None


class GenerateDocumentResponse(BaseModel):
    document: str
    suggested_title: str | None = None


# =============================================================================
# Document Schemas
# =============================================================================


class DiagramSchema(BaseModel):
    """A diagram found in a document."""

    model_config = ConfigDict(from_attributes=True)

    filename: str
    macro_id: str
    source_code: str


class PrepareDocumentRequest(BaseModel):
    document: str = Field(description="Generated storage-format document")


class PrepareDocumentResponse(BaseModel):
    """Response for document preparation."""

    document: str = Field(description="Document ready for page creation")
    diagrams: list[DiagramSchema] = Field(default_factory=list)


class PublishDocumentRequest(BaseModel):
    """Request schema for publishing a document as a new page."""

    title: str = ""
    document: str = Field(description="Generated storage-format document")
    space_key: str = Field(min_length=1, description="Target space key")
    parent_id: str | None = None


class PublishDocumentResponse(BaseModel):
    """Response for a published document."""

    page_id: str
    title: str
    web_url: str | None = None
    diagrams_succeeded: int = 0
    diagrams_total: int = 0
    errors: list[str] = Field(default_factory=list)
    summary: str = ""
