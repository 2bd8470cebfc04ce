# =============================================================================
# core/services/__init__.py - Service Layer Exports
# =============================================================================

from .clinical_program_service import ClinicalProgramService
from .resource_library_service import ResourceLibraryService
from .program_service import ProgramService
from .library_service import LibraryService
from .storage_service import StorageService
from .migration_service import AttachmentMigrator, MIGRATION_TABLES
from .member_service import DashboardService, MemberActivityStore, activity_store

__all__ = [
    "ClinicalProgramService",
    "ResourceLibraryService",
    "ProgramService",
    "LibraryService",
    "StorageService",
    "AttachmentMigrator",
    "MIGRATION_TABLES",
    "DashboardService",
    "MemberActivityStore",
    "activity_store",
]
