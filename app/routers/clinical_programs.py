# =============================================================================
# app/routers/clinical_programs.py - Clinical Programs Endpoint (Airtable)
# =============================================================================
# GET /api/clinical-programs              -> {"items": [...]}
# GET /api/clinical-programs?programSlug= -> one program with its modules,
#                                            manuals, forms and resources
#
# Only GET is routed, so any other method gets 405 {"error": ...}.
# Optional values that are empty in Airtable are left out of the JSON.
# =============================================================================

import logging
from typing import Optional

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse

from app.config import settings
from app.dependencies import ClinicalProgramServiceDep

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/clinical-programs", response_class=JSONResponse)
def get_clinical_programs(
    service: ClinicalProgramServiceDep,
    programSlug: Optional[str] = Query(None, description="Return one program's detail"),
) -> JSONResponse:
    """
    List programs, or return full detail for one program.

    Returns:
        ProgramList when programSlug is absent or blank, else ProgramDetail

    Raises:
        404: Program not found
        500: Airtable not configured or failing
    """
    slug = (programSlug or "").strip()
    if slug:
        result = service.get_program_detail(slug)
    else:
        result = service.list_programs()

    return JSONResponse(
        content=result.model_dump(mode="json", exclude_none=True),
        headers={"Cache-Control": settings.CACHE_CONTROL},
    )
