# =============================================================================
# app/routers/programs.py - Program Catalog Endpoints (Supabase)
# =============================================================================
# Member-only reads of the Supabase program tables:
#   GET /api/v1/programs          - all programs ordered by name
#   GET /api/v1/programs/{slug}   - one program with its child rows
# =============================================================================

import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from app.auth import AuthMember, get_current_member
from app.dependencies import ProgramServiceDep
from app.exceptions import ProgramNotFoundError
from core.models.program import (
    AdditionalResource,
    DocumentationForm,
    Program,
    ProgramMeta,
    ProtocolManual,
    TrainingModule,
)

logger = logging.getLogger(__name__)

router = APIRouter()


# =============================================================================
# Response Models
# =============================================================================

class ProgramsResponse(BaseModel):
    programs: list[Program] = Field(default_factory=list)


class ProgramDetailResponse(BaseModel):
    program: Program | None = None
    meta: ProgramMeta | None = None
    modules: list[TrainingModule] = Field(default_factory=list)
    manuals: list[ProtocolManual] = Field(default_factory=list)
    forms: list[DocumentationForm] = Field(default_factory=list)
    resources: list[AdditionalResource] = Field(default_factory=list)
    counts: dict[str, int] = Field(default_factory=dict)


# =============================================================================
# Endpoints
# =============================================================================

@router.get("", response_model=ProgramsResponse)
def list_programs(
    service: ProgramServiceDep,
    member: AuthMember = Depends(get_current_member),
) -> ProgramsResponse:
    """All programs ordered by name."""
    return ProgramsResponse(programs=service.get_all())


@router.get("/{slug}", response_model=ProgramDetailResponse)
def get_program(
    slug: str,
    service: ProgramServiceDep,
    member: AuthMember = Depends(get_current_member),
) -> ProgramDetailResponse:
    """
    One program with modules, manuals, forms and resources.

    A known program whose row has not been migrated yet returns its
    static header copy with empty sections.

    Raises:
        404: Unknown slug
    """
    bundle = service.get_program_detail(slug)
    if bundle is None:
        meta = service.get_meta(slug)
        if meta is None:
            raise ProgramNotFoundError(slug)
        logger.info(f"Serving fallback metadata for {slug}")
        return ProgramDetailResponse(
            meta=meta,
            counts={"training": 0, "protocols": 0, "forms": 0, "resources": 0},
        )

    return ProgramDetailResponse(
        program=bundle.program,
        meta=service.get_meta(slug, bundle.program),
        modules=bundle.modules,
        manuals=bundle.manuals,
        forms=bundle.forms,
        resources=bundle.resources,
        counts=bundle.section_counts,
    )
