"""Metadata registry request schemas."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class SourceRequest(BaseModel):
    """A free-text identifier such as a DOI, ISBN or URL."""

    source: str = Field(..., min_length=1)


class MetadataValidateRequest(BaseModel):
    """Form data to check against one content type's schema."""

    model_config = ConfigDict(populate_by_name=True)

    content_type: str = Field(..., alias="contentType", min_length=1)
    data: dict[str, Any] = {}
