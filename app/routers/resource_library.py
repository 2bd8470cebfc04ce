# =============================================================================
# app/routers/resource_library.py - Resource Library Endpoint (Airtable)
# =============================================================================
# GET /api/resource-library?cat=handouts|clinical|billing&q=<text>
#   -> {"items": [{"id", "name", "url", "category"}, ...]}
# =============================================================================

from typing import Optional

from fastapi import APIRouter, Query, Response

from app.config import settings
from app.dependencies import ResourceLibraryServiceDep
from core.models.library import ResourceLibraryResponse

router = APIRouter()


@router.get("/resource-library", response_model=ResourceLibraryResponse, response_model_exclude_none=True)
def get_resource_library(
    response: Response,
    service: ResourceLibraryServiceDep,
    cat: Optional[str] = Query(None, description="handouts | clinical | billing"),
    q: Optional[str] = Query(None, description="Search in name and category"),
) -> ResourceLibraryResponse:
    """
    Unified library across patient handouts, clinical guidelines and
    billing resources.

    An unknown `cat` matches nothing and returns an empty list.
    """
    result = service.search(category=cat, query=q)
    response.headers["Cache-Control"] = settings.CACHE_CONTROL
    return result
