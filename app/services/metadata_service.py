"""Metadata schema registry and content type detection."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

import httpx

from app.config import settings
from app.services.metadata_schemas import BaseSchema, ContentType, default_schemas, is_isbn
from app.utils.errors import SchemaNotFoundError

logger = logging.getLogger(__name__)


def detect_content_type(source: str) -> ContentType:
    """Classify a free-text identifier.

    Rules run in order: DOI (``10.`` prefix or ``doi.org``) is an article, an
    ISBN is a book, and everything else, URL or not, is a website.
    """
    value = source.strip()
    if value.startswith("10.") or "doi.org" in value:
        return ContentType.ARTICLE
    if is_isbn(value):
        return ContentType.BOOK
    return ContentType.WEBSITE


class MetadataRegistry:
    """Mutable mapping from content type to schema.

    Instances are independent; the app keeps one on ``app.state``.
    """

    def __init__(self, schemas: Iterable[BaseSchema] | None = None) -> None:
        self._schemas: dict[str, BaseSchema] = {}
        for schema in default_schemas() if schemas is None else schemas:
            self.register_schema(schema)

    def register_schema(self, schema: BaseSchema) -> None:
        """Add a schema, replacing any schema already registered for its type."""
        self._schemas[str(schema.type)] = schema

    def get_schemas(self) -> list[BaseSchema]:
        return list(self._schemas.values())

    def get_schema(self, content_type: str) -> BaseSchema:
        schema = self._schemas.get(str(content_type))
        if schema is None:
            raise SchemaNotFoundError(str(content_type))
        return schema

    def create_metadata(self, content_type: str, data: dict[str, Any]) -> dict[str, Any]:
        return self.get_schema(content_type).create_metadata(data)

    def validate_metadata(self, content_type: str, data: dict[str, Any]) -> dict[str, str] | None:
        return self.get_schema(content_type).validate_metadata(data)

    def detect_content_type(self, source: str) -> ContentType:
        return detect_content_type(source)

    async def extract_metadata(
        self,
        source: str,
        http: httpx.AsyncClient | None = None,
    ) -> dict[str, Any]:
        """Detect the content type of ``source`` and look up its metadata.

        Lookup failures are logged and yield ``{"type": <content type>}``.
        """
        content_type = self.detect_content_type(source)
        schema = self.get_schema(content_type)
        try:
            if http is not None:
                metadata = await schema.extract_metadata(source, http)
            else:
                timeout = httpx.Timeout(max(1, settings.metadata_http_timeout_seconds))
                async with httpx.AsyncClient(timeout=timeout) as client:
                    metadata = await schema.extract_metadata(source, client)
        except (
            httpx.HTTPError,
            NotImplementedError,
            ValueError,
            KeyError,
            AttributeError,
            TypeError,
        ):
            logger.exception("Error extracting metadata for %s", content_type)
            metadata = {"type": str(content_type)}
        return {"content_type": str(content_type), "metadata": metadata}
