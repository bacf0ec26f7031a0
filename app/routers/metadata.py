"""Metadata schema endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from app.dependencies import get_metadata_registry
from app.schemas.metadata import MetadataValidateRequest, SourceRequest
from app.services.metadata_service import MetadataRegistry

router = APIRouter()


@router.get("/schemas")
def list_schemas(registry: MetadataRegistry = Depends(get_metadata_registry)) -> dict:
    """Describe every registered schema and its form fields."""
    return {"schemas": [schema.describe() for schema in registry.get_schemas()]}


@router.get("/schemas/{content_type}")
def get_schema(
    content_type: str,
    registry: MetadataRegistry = Depends(get_metadata_registry),
) -> dict:
    return {"schema": registry.get_schema(content_type).describe()}


@router.post("/detect")
def detect_content_type(
    payload: SourceRequest,
    registry: MetadataRegistry = Depends(get_metadata_registry),
) -> dict:
    """Classify a DOI, ISBN or URL."""
    return {"contentType": str(registry.detect_content_type(payload.source))}


@router.post("/validate")
def validate_metadata(
    payload: MetadataValidateRequest,
    registry: MetadataRegistry = Depends(get_metadata_registry),
) -> dict:
    """Validate form data and return normalized metadata when it passes."""
    errors = registry.validate_metadata(payload.content_type, payload.data)
    if errors:
        return {"valid": False, "errors": errors, "metadata": None}
    metadata = registry.create_metadata(payload.content_type, payload.data)
    return {"valid": True, "errors": None, "metadata": metadata}


@router.post("/extract")
async def extract_metadata(
    payload: SourceRequest,
    registry: MetadataRegistry = Depends(get_metadata_registry),
) -> dict:
    """Look up metadata for a DOI or ISBN from public catalogues."""
    result = await registry.extract_metadata(payload.source)
    return {"contentType": result["content_type"], "metadata": result["metadata"]}
