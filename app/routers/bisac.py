"""BISAC subject code lookup endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from app.dependencies import get_bisac
from app.services.bisac_service import BisacCatalog

router = APIRouter()


@router.get("")
def lookup_bisac_codes(
    query_type: str = Query(default="search", alias="type"),
    q: str = Query(default=""),
    limit: int = Query(default=50),
    catalog: BisacCatalog = Depends(get_bisac),
) -> dict:
    """Search codes, list categories, or fetch codes by category or code."""
    return {"bisacCodes": catalog.lookup(query_type, q, max(limit, 0))}
