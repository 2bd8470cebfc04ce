# =============================================================================
# app/dependencies.py - Shared Dependencies
# =============================================================================
# FastAPI dependency injection for services.
# These are injected into route handlers using Depends(); tests swap them
# through app.dependency_overrides.
# =============================================================================

from typing import Annotated, Iterator

from fastapi import Depends

from core.services.clinical_program_service import ClinicalProgramService
from core.services.library_service import LibraryService
from core.services.member_service import DashboardService, MemberActivityStore, activity_store
from core.services.program_service import ProgramService
from core.services.resource_library_service import ResourceLibraryService


def get_clinical_program_service() -> Iterator[ClinicalProgramService]:
    """Airtable program service; its HTTP client is closed after the request."""
    service = ClinicalProgramService()
    try:
        yield service
    finally:
        service.close()


def get_resource_library_service() -> Iterator[ResourceLibraryService]:
    service = ResourceLibraryService()
    try:
        yield service
    finally:
        service.close()


def get_program_service() -> type[ProgramService]:
    return ProgramService


def get_library_service() -> type[LibraryService]:
    return LibraryService


def get_activity_store() -> MemberActivityStore:
    return activity_store


def get_dashboard_service(
    programs: ClinicalProgramService = Depends(get_clinical_program_service),
    store: MemberActivityStore = Depends(get_activity_store),
) -> DashboardService:
    return DashboardService(programs=programs, store=store)


# Type aliases for dependency injection
ClinicalProgramServiceDep = Annotated[ClinicalProgramService, Depends(get_clinical_program_service)]
ResourceLibraryServiceDep = Annotated[ResourceLibraryService, Depends(get_resource_library_service)]
ProgramServiceDep = Annotated[type[ProgramService], Depends(get_program_service)]
LibraryServiceDep = Annotated[type[LibraryService], Depends(get_library_service)]
ActivityStoreDep = Annotated[MemberActivityStore, Depends(get_activity_store)]
DashboardServiceDep = Annotated[DashboardService, Depends(get_dashboard_service)]
