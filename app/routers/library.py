# =============================================================================
# app/routers/library.py - Resource Library Endpoints (Supabase)
# =============================================================================
#   GET /api/v1/library?category=handouts|clinical|billing
#   GET /api/v1/library/catalog?program=&quick=&types=&categories=&programs=&q=
#
# types / categories / programs are repeatable query parameters.
# =============================================================================

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from app.auth import AuthMember, get_current_member
from app.dependencies import LibraryServiceDep
from core.models.library import (
    CategorizedResource,
    CategoryTag,
    FileType,
    LibraryFile,
    LibraryFilter,
    QuickCard,
    ResourceCategory,
)

logger = logging.getLogger(__name__)

router = APIRouter()


class LibraryResponse(BaseModel):
    items: list[CategorizedResource] = Field(default_factory=list)


class CatalogResponse(BaseModel):
    items: list[LibraryFile] = Field(default_factory=list)
    total: int = 0
    filters: LibraryFilter


@router.get("", response_model=LibraryResponse)
def list_library(
    service: LibraryServiceDep,
    category: Optional[ResourceCategory] = Query(None),
    member: AuthMember = Depends(get_current_member),
) -> LibraryResponse:
    """Global library tables merged and tagged by category."""
    return LibraryResponse(items=service.get_all_resources(category))


@router.get("/catalog", response_model=CatalogResponse)
def get_catalog(
    service: LibraryServiceDep,
    program: Optional[str] = Query(None, description="Only this program's files"),
    quick: QuickCard = Query(QuickCard.ALL),
    types: list[FileType] = Query([]),
    categories: list[CategoryTag] = Query([]),
    programs: list[str] = Query([]),
    q: str = Query(""),
    member: AuthMember = Depends(get_current_member),
) -> CatalogResponse:
    """Member catalog with quick card, facet filters and search."""
    filters = LibraryFilter(quick=quick, types=types, categories=categories, programs=programs, q=q)
    items = service.filter_catalog(service.build_catalog(program or None), filters)
    return CatalogResponse(items=items, total=len(items), filters=filters)
