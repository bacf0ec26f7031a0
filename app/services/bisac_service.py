"""Static BISAC subject code lookup."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Any

from app.config import settings

logger = logging.getLogger(__name__)

DEFAULT_DATA_PATH = Path(__file__).resolve().parents[1] / "data" / "bisac_codes.json"


@dataclass
class BisacCatalog:
    """In-memory BISAC codes and their main categories."""

    codes: list[dict[str, Any]] = field(default_factory=list)
    categories: list[dict[str, Any]] = field(default_factory=list)

    def search(self, query: str, limit: int) -> list[dict[str, Any]]:
        """Match ``query`` case-insensitively against code or description."""
        needle = query.strip().lower()
        if not needle:
            return []
        matches = [
            code
            for code in self.codes
            if needle in code["code"].lower() or needle in code["description"].lower()
        ]
        return matches[:limit]

    def by_category(self, category: str, limit: int) -> list[dict[str, Any]]:
        if not category:
            return []
        return [code for code in self.codes if code["mainCategory"] == category][:limit]

    def by_codes(self, raw_codes: str) -> list[dict[str, Any]]:
        wanted = {value.strip() for value in raw_codes.split(",") if value.strip()}
        if not wanted:
            return []
        return [code for code in self.codes if code["code"] in wanted]

    def lookup(self, query_type: str, query: str, limit: int) -> list[dict[str, Any]]:
        """Dispatch a ``GET /bisac-codes`` query; unknown types return nothing."""
        if query_type == "search":
            return self.search(query, limit)
        if query_type == "categories":
            return list(self.categories)
        if query_type == "by_category":
            return self.by_category(query, limit)
        if query_type == "by_codes":
            return self.by_codes(query)
        return []


def build_catalog(entries: list[dict[str, str]]) -> BisacCatalog:
    """Build a catalog from raw ``{code, description}`` entries.

    Hierarchy comes from the `` / `` separators in each description: the first
    segment is the main category and the rest is the subcategory.
    """
    codes: list[dict[str, Any]] = []
    counts: dict[str, int] = {}
    for entry in entries:
        code = (entry.get("code") or "").strip()
        description = (entry.get("description") or "").strip()
        if not code or not description:
            continue
        parts = description.split(" / ")
        main_category = parts[0]
        codes.append(
            {
                "code": code,
                "description": description,
                "mainCategory": main_category,
                "subCategory": " / ".join(parts[1:]) if len(parts) > 1 else None,
                "level": len(parts),
            }
        )
        counts[main_category] = counts.get(main_category, 0) + 1

    categories = [{"name": name, "count": counts[name]} for name in sorted(counts)]
    return BisacCatalog(codes=codes, categories=categories)


def load_bisac_catalog(path: Path | str | None = None) -> BisacCatalog:
    """Load the prepared JSON file; an unreadable file yields an empty catalog."""
    data_path = Path(path) if path else DEFAULT_DATA_PATH
    try:
        raw = json.loads(data_path.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        logger.exception("Could not load BISAC data from %s", data_path)
        return BisacCatalog()

    logger.info("Loaded BISAC data from %s", data_path)
    return BisacCatalog(
        codes=list(raw.get("codes") or []),
        categories=list(raw.get("categories") or []),
    )


@lru_cache(maxsize=1)
def get_bisac_catalog() -> BisacCatalog:
    """Return the process-wide catalog, loading it on first use."""
    return load_bisac_catalog(settings.bisac_data_path)
