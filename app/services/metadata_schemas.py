"""Bookmark metadata schemas for books, articles and websites."""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum
from typing import Any
from urllib.parse import urlparse

import httpx
from pydantic import AnyUrl, TypeAdapter, ValidationError

ISBN_PATTERN = re.compile(
    r"^(?:ISBN(?:-1[03])?:? )?"
    r"(?=[0-9X]{10}$|(?=(?:[0-9]+[- ]){3})[- 0-9X]{13}$|97[89][0-9]{10}$"
    r"|(?=(?:[0-9]+[- ]){4})[- 0-9]{17}$)"
    r"(?:97[89][- ]?)?[0-9]{1,5}[- ]?[0-9]+[- ]?[0-9]+[- ]?[0-9X]$",
    re.IGNORECASE,
)
DOI_PATTERN = re.compile(r"^10\.\d{4,9}/[-._;()/:A-Z0-9]+$", re.IGNORECASE)
DOI_IN_URL_PATTERN = re.compile(r"doi\.org/(10\.\d{4,9}/[-._;()/:A-Z0-9]+)$", re.IGNORECASE)

GOOGLE_BOOKS_URL = "https://www.googleapis.com/books/v1/volumes"
CROSSREF_WORKS_URL = "https://api.crossref.org/works/"

_url_adapter = TypeAdapter(AnyUrl)

Validator = Callable[[Any], str | None]


class ContentType(StrEnum):
    """Kinds of content a bookmark can point at."""

    BOOK = "book"
    ARTICLE = "article"
    WEBSITE = "website"


@dataclass(frozen=True)
class FormField:
    """One input of a metadata form."""

    name: str
    label: str
    type: str
    required: bool = False
    placeholder: str | None = None
    help_text: str | None = None
    options: tuple[tuple[str, str], ...] = ()
    validation: Validator | None = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "name": self.name,
            "label": self.label,
            "type": self.type,
            "required": self.required,
        }
        if self.placeholder:
            payload["placeholder"] = self.placeholder
        if self.help_text:
            payload["helpText"] = self.help_text
        if self.options:
            payload["options"] = [{"value": value, "label": label} for value, label in self.options]
        return payload


def is_isbn(value: str) -> bool:
    return bool(ISBN_PATTERN.match(value.strip()))


def is_doi(value: str) -> bool:
    return bool(DOI_PATTERN.match(value.strip()))


def is_url(value: str) -> bool:
    try:
        _url_adapter.validate_python(value)
    except ValidationError:
        return False
    return True


def split_list(value: Any) -> list[str]:
    """Normalize a list or comma-separated string into a list of strings."""
    if isinstance(value, list):
        return value
    if isinstance(value, str):
        return [item.strip() for item in value.split(",") if item.strip()]
    return []


def split_authors(value: Any) -> Any:
    """Split comma-separated author strings; leave everything else alone."""
    if isinstance(value, str) and "," in value:
        return split_list(value)
    return value


def _to_int(value: Any) -> int | None:
    try:
        return int(value) if value not in (None, "") else None
    except (TypeError, ValueError):
        return None


def _required(label: str) -> Validator:
    return lambda value: None if value else f"{label} is required"


def _pattern(check: Callable[[str], bool], message: str) -> Validator:
    def validate(value: Any) -> str | None:
        if not value:
            return None
        return None if isinstance(value, str) and check(value) else message

    return validate


BASE_FIELDS: tuple[FormField, ...] = (
    FormField(
        "title",
        "Title",
        "text",
        required=True,
        placeholder="Enter title",
        validation=_required("Title"),
    ),
    FormField("description", "Description", "textarea", placeholder="Enter description"),
    FormField("image", "Cover Image URL", "url", placeholder="https://example.com/image.jpg"),
    FormField(
        "tags",
        "Tags",
        "tags",
        placeholder="Add tags",
        help_text="Press Enter or comma to add a tag",
    ),
    FormField("external_url", "External URL", "url", placeholder="https://example.com"),
)


class BaseSchema(ABC):
    """Shared behaviour for metadata schemas."""

    type: ContentType
    name: str
    description: str
    icon: str
    extra_fields: tuple[FormField, ...] = ()

    @property
    def fields(self) -> tuple[FormField, ...]:
        return BASE_FIELDS + self.extra_fields

    def describe(self) -> dict[str, Any]:
        return {
            "type": str(self.type),
            "name": self.name,
            "description": self.description,
            "icon": self.icon,
            "fields": [form_field.to_dict() for form_field in self.fields],
        }

    @abstractmethod
    def create_metadata(self, data: dict[str, Any]) -> dict[str, Any]:
        """Normalise validated form data into stored metadata."""

    def validate_metadata(self, data: dict[str, Any]) -> dict[str, str] | None:
        """Return field errors keyed by field name, or None when valid."""
        errors: dict[str, str] = {}
        for form_field in self.fields:
            value = data.get(form_field.name)
            if form_field.required and not value:
                errors[form_field.name] = f"{form_field.label} is required"
            if form_field.validation and value:
                error = form_field.validation(value)
                if error:
                    errors[form_field.name] = error
        return errors or None

    async def extract_metadata(self, source: str, http: httpx.AsyncClient) -> dict[str, Any]:
        raise NotImplementedError(f"Metadata extraction is not supported for {self.type}")


class BookSchema(BaseSchema):
    type = ContentType.BOOK
    name = "Book"
    description = "Create a bookmark for a book"
    icon = "BookIcon"
    extra_fields = (
        FormField(
            "author",
            "Author",
            "text",
            required=True,
            placeholder="Author name(s)",
            help_text="For multiple authors, separate with commas",
            validation=_required("Author"),
        ),
        FormField(
            "isbn",
            "ISBN",
            "text",
            placeholder="ISBN",
            validation=_pattern(is_isbn, "Invalid ISBN format"),
        ),
        FormField("doi", "DOI", "text", placeholder="DOI"),
        FormField("publisher", "Publisher", "text", placeholder="Publisher name"),
        FormField("publish_date", "Publication Date", "date", placeholder="YYYY-MM-DD"),
        FormField("language", "Language", "text", placeholder="Language"),
        FormField("edition", "Edition", "text", placeholder="Edition"),
        FormField("page_count", "Page Count", "number", placeholder="Number of pages"),
        FormField(
            "bisac_codes",
            "BISAC Codes",
            "tags",
            placeholder="Add BISAC codes",
            help_text="Press Enter or comma to add a code",
        ),
        FormField(
            "translators",
            "Translators",
            "tags",
            placeholder="Add translators",
            help_text="Press Enter or comma to add a translator",
        ),
        FormField("series", "Series", "text", placeholder="Series name"),
        FormField("volume", "Volume", "text", placeholder="Volume or part number"),
    )

    def create_metadata(self, data: dict[str, Any]) -> dict[str, Any]:
        return {
            "type": str(ContentType.BOOK),
            "title": data.get("title"),
            "author": split_authors(data.get("author")),
            "description": data.get("description"),
            "image": data.get("image"),
            "isbn": data.get("isbn"),
            "doi": data.get("doi"),
            "publisher": data.get("publisher"),
            "publish_date": data.get("publish_date"),
            "language": data.get("language"),
            "edition": data.get("edition"),
            "page_count": _to_int(data.get("page_count")),
            "bisac_codes": split_list(data.get("bisac_codes")),
            "translators": split_list(data.get("translators")),
            "series": data.get("series"),
            "volume": data.get("volume"),
            "tags": split_list(data.get("tags")),
            "external_url": data.get("external_url"),
        }

    async def extract_metadata(self, source: str, http: httpx.AsyncClient) -> dict[str, Any]:
        if not is_isbn(source):
            return {"type": str(ContentType.BOOK)}

        isbn = re.sub(r"[^0-9X]", "", source.upper().removeprefix("ISBN-13").removeprefix("ISBN-10"))
        response = await http.get(GOOGLE_BOOKS_URL, params={"q": f"isbn:{isbn}"})
        response.raise_for_status()
        items = response.json().get("items") or []
        if not items:
            return {"type": str(ContentType.BOOK), "isbn": isbn}

        book = items[0].get("volumeInfo") or {}
        return {
            "type": str(ContentType.BOOK),
            "title": book.get("title"),
            "author": book.get("authors") or [],
            "description": book.get("description"),
            "image": (book.get("imageLinks") or {}).get("thumbnail"),
            "isbn": isbn,
            "publisher": book.get("publisher"),
            "publish_date": book.get("publishedDate"),
            "language": book.get("language"),
            "page_count": book.get("pageCount"),
            "tags": book.get("categories") or [],
        }


class ArticleSchema(BaseSchema):
    type = ContentType.ARTICLE
    name = "Academic Article"
    description = "Create a bookmark for an academic or journal article"
    icon = "FileTextIcon"
    extra_fields = (
        FormField(
            "author",
            "Author(s)",
            "text",
            required=True,
            placeholder="Author name(s)",
            help_text="For multiple authors, separate with commas",
            validation=_required("Author"),
        ),
        FormField(
            "doi",
            "DOI",
            "text",
            placeholder="e.g., 10.1000/xyz123",
            help_text="Digital Object Identifier",
            validation=_pattern(is_doi, "Invalid DOI format"),
        ),
        FormField("journal", "Journal", "text", placeholder="Journal name"),
        FormField("volume", "Volume", "text", placeholder="Volume number"),
        FormField("issue", "Issue", "text", placeholder="Issue number"),
        FormField("pages", "Pages", "text", placeholder="e.g., 123-145"),
        FormField("publish_date", "Publication Date", "date", placeholder="YYYY-MM-DD"),
        FormField("publisher", "Publisher", "text", placeholder="Publisher name"),
        FormField("abstract", "Abstract", "textarea", placeholder="Article abstract"),
        FormField(
            "keywords",
            "Keywords",
            "tags",
            placeholder="Add keywords",
            help_text="Press Enter or comma to add a keyword",
        ),
        FormField("url", "URL", "url", placeholder="https://example.com/article"),
    )

    def create_metadata(self, data: dict[str, Any]) -> dict[str, Any]:
        return {
            "type": str(ContentType.ARTICLE),
            "title": data.get("title"),
            "author": split_authors(data.get("author")),
            "description": data.get("description"),
            "image": data.get("image"),
            "doi": data.get("doi"),
            "journal": data.get("journal"),
            "volume": data.get("volume"),
            "issue": data.get("issue"),
            "pages": data.get("pages"),
            "publish_date": data.get("publish_date"),
            "publisher": data.get("publisher"),
            "abstract": data.get("abstract"),
            "keywords": split_list(data.get("keywords")),
            "url": data.get("url"),
            "tags": split_list(data.get("tags")),
            "external_url": data.get("external_url"),
        }

    async def extract_metadata(self, source: str, http: httpx.AsyncClient) -> dict[str, Any]:
        doi = source.strip()
        if "doi.org" in doi:
            match = DOI_IN_URL_PATTERN.search(doi)
            if match:
                doi = match.group(1)
        if not is_doi(doi):
            return {"type": str(ContentType.ARTICLE)}

        response = await http.get(f"{CROSSREF_WORKS_URL}{doi}")
        response.raise_for_status()
        article = response.json().get("message") or {}
        authors = [
            f"{person.get('given', '')} {person.get('family', '')}".strip()
            for person in article.get("author") or []
        ]
        return {
            "type": str(ContentType.ARTICLE),
            "title": (article.get("title") or [""])[0],
            "author": [name for name in authors if name],
            "doi": doi,
            "journal": (article.get("container-title") or [""])[0],
            "volume": article.get("volume", ""),
            "issue": article.get("issue", ""),
            "pages": article.get("page", ""),
            "publish_date": (article.get("created") or {}).get("date-time", ""),
            "publisher": article.get("publisher", ""),
            "url": article.get("URL", ""),
            "external_url": f"https://doi.org/{doi}",
        }


WEBSITE_CATEGORIES = (
    ("blog", "Blog"),
    ("news", "News"),
    ("reference", "Reference"),
    ("social", "Social Media"),
    ("entertainment", "Entertainment"),
    ("education", "Education"),
    ("business", "Business"),
    ("technology", "Technology"),
    ("other", "Other"),
)


def _validate_website_url(value: Any) -> str | None:
    if not value:
        return "URL is required"
    return None if isinstance(value, str) and is_url(value) else "Invalid URL format"


class WebsiteSchema(BaseSchema):
    type = ContentType.WEBSITE
    name = "Website"
    description = "Create a bookmark for a website"
    icon = "GlobeIcon"
    extra_fields = (
        FormField(
            "url",
            "URL",
            "url",
            required=True,
            placeholder="https://example.com",
            validation=_validate_website_url,
        ),
        FormField("site_name", "Site Name", "text", placeholder="Website name"),
        FormField("author", "Author/Creator", "text", placeholder="Creator of the content"),
        FormField("published_date", "Published Date", "date", placeholder="YYYY-MM-DD"),
        FormField("last_updated", "Last Updated", "date", placeholder="YYYY-MM-DD"),
        FormField("language", "Language", "text", placeholder="e.g., en-US"),
        FormField("favicon", "Favicon URL", "url", placeholder="https://example.com/favicon.ico"),
        FormField("is_favorite", "Favorite", "checkbox", help_text="Mark as a favorite bookmark"),
        FormField(
            "category",
            "Category",
            "select",
            placeholder="Select a category",
            options=WEBSITE_CATEGORIES,
        ),
        FormField(
            "notes",
            "Notes",
            "textarea",
            placeholder="Your personal notes about this website",
        ),
    )

    def create_metadata(self, data: dict[str, Any]) -> dict[str, Any]:
        return {
            "type": str(ContentType.WEBSITE),
            "title": data.get("title"),
            "description": data.get("description"),
            "image": data.get("image"),
            "url": data.get("url"),
            "site_name": data.get("site_name"),
            "author": split_authors(data.get("author")),
            "published_date": data.get("published_date"),
            "last_updated": data.get("last_updated"),
            "language": data.get("language"),
            "favicon": data.get("favicon"),
            "is_favorite": bool(data.get("is_favorite")),
            "category": data.get("category"),
            "tags": split_list(data.get("tags")),
            "notes": data.get("notes"),
            "external_url": data.get("external_url") or data.get("url"),
        }

    async def extract_metadata(self, source: str, http: httpx.AsyncClient) -> dict[str, Any]:
        parsed = urlparse(source)
        if not parsed.scheme.startswith("http") or not parsed.hostname:
            return {"type": str(ContentType.WEBSITE), "title": "", "url": source}
        return {
            "type": str(ContentType.WEBSITE),
            "title": parsed.hostname,
            "url": source,
            "favicon": f"{parsed.scheme}://{parsed.hostname}/favicon.ico",
            "external_url": source,
        }


def default_schemas() -> list[BaseSchema]:
    """Return fresh instances of the built-in schemas."""
    return [BookSchema(), ArticleSchema(), WebsiteSchema()]
