"""Template engine domain models.

Pydantic models for the content generation request. These live here
rather than in the API layer to avoid circular imports.
"""

from pydantic import BaseModel, ConfigDict, Field


class FillRequest(BaseModel):
    """Payload sent to the content generation service.

    Field names follow the service's wire format; ``selected_model`` is
    sent as ``selectedModel``.
    """

    model_config = ConfigDict(populate_by_name=True)

    ba_content: str = Field(description="Business analysis text the document is generated from")
    template_structure: str = Field(description="Template with empty slots marked")
    original_storage_format: str = Field(description="Unmodified template markup")
    instructions: str = Field(default="", description="Instruction page content")
    additional_prompt: str = Field(default="", description="Extra user prompt")
    placeholders: list[str] = Field(default_factory=list, description="Placeholder tokens to fill")
    selected_model: str = Field(default="sonar-pro", alias="selectedModel")

    def to_payload(self) -> dict:
        return self.model_dump(by_alias=True)
