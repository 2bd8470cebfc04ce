# =============================================================================
# core/services/library_service.py - Resource Library (Supabase)
# =============================================================================
# Two views over the migrated files:
# - get_all_resources(): the three global library tables merged and tagged
#   handouts / clinical / billing
# - build_catalog() + filter_catalog(): the member catalog, which also pulls
#   in program child tables and supports quick cards, faceted filters and
#   search
# =============================================================================

import logging
import posixpath
from typing import Iterable

from core.models.library import (
    CategorizedResource,
    CategoryTag,
    ClinicalGuideline,
    FileType,
    LibraryFile,
    LibraryFilter,
    LibraryRow,
    MedicalBillingResource,
    PatientHandout,
    QuickCard,
    ResourceCategory,
)
from core.models.program import Program, ProgramFile
from core.services.program_service import (
    LIBRARY_BUCKET,
    PROGRAMS_BUCKET,
    ProgramService,
    fetch,
    public_url,
)

logger = logging.getLogger(__name__)


# Extension groups for type detection
VIDEO_EXTENSIONS = {".mp4", ".mov", ".m4v", ".webm", ".avi", ".mkv"}
SHEET_EXTENSIONS = {".xls", ".xlsx", ".csv", ".ods"}
PDF_EXTENSIONS = {".pdf"}
DOC_EXTENSIONS = {".doc", ".docx", ".rtf", ".odt", ".txt"}

# Global table -> (row model, API category, catalog category)
GLOBAL_TABLES: tuple[tuple[str, type[LibraryRow], ResourceCategory, CategoryTag], ...] = (
    ("patient_handouts", PatientHandout, ResourceCategory.HANDOUTS, CategoryTag.HANDOUTS),
    ("clinical_guidelines", ClinicalGuideline, ResourceCategory.CLINICAL, CategoryTag.GUIDELINES),
    ("medical_billing_resources", MedicalBillingResource, ResourceCategory.BILLING, CategoryTag.BILLING),
)

# Program child table -> catalog category
PROGRAM_TABLES: tuple[tuple[str, CategoryTag], ...] = (
    ("training_modules", CategoryTag.TRAINING),
    ("protocol_manuals", CategoryTag.PROTOCOLS),
    ("documentation_forms", CategoryTag.FORMS),
    ("additional_resources", CategoryTag.RESOURCES),
)


def format_size(size: int | None) -> str | None:
    """
    Human-readable file size.

    Examples:
        512 -> "512 B", 2048 -> "2.0 KB", 5_242_880 -> "5.0 MB"
    """
    if size is None:
        return None
    if size < 1024:
        return f"{size} B"
    if size < 1024 * 1024:
        return f"{size / 1024:.1f} KB"
    return f"{size / (1024 * 1024):.1f} MB"


def detect_file_type(filename: str) -> FileType:
    """Type bucket from the file extension; video wins over everything else."""
    ext = posixpath.splitext(filename.lower().split("?", 1)[0])[1]
    if ext in VIDEO_EXTENSIONS:
        return FileType.VIDEO
    if ext in SHEET_EXTENSIONS:
        return FileType.SHEET
    if ext in PDF_EXTENSIONS:
        return FileType.PDF
    if ext in DOC_EXTENSIONS:
        return FileType.DOC
    return FileType.OTHER


def _filename(path: str | None, link: str | None) -> str:
    source = path or link or ""
    return posixpath.basename(source.split("?", 1)[0].rstrip("/"))


def _library_file(
    row: LibraryRow | ProgramFile,
    category: CategoryTag,
    bucket: str,
    program: str | None = None,
) -> LibraryFile:
    filename = _filename(row.file_path, row.link)
    return LibraryFile(
        id=row.id,
        title=row.name or filename,
        filename=filename,
        path=row.file_path or "",
        url=row.link or public_url(bucket, row.file_path) or None,
        category=category,
        program=program,
        type_tag=detect_file_type(filename),
        size=row.file_size,
        size_label=format_size(row.file_size),
    )


class LibraryService:
    """Service for the Supabase-backed library tables and member catalog."""

    # -------------------------------------------------------------------------
    # Global tables
    # -------------------------------------------------------------------------

    @staticmethod
    def get_patient_handouts() -> list[PatientHandout]:
        return [PatientHandout(**row) for row in fetch("patient_handouts", order="name")]

    @staticmethod
    def get_clinical_guidelines() -> list[ClinicalGuideline]:
        return [ClinicalGuideline(**row) for row in fetch("clinical_guidelines", order="name")]

    @staticmethod
    def get_medical_billing_resources() -> list[MedicalBillingResource]:
        return [MedicalBillingResource(**row) for row in fetch("medical_billing_resources", order="name")]

    @classmethod
    def get_all_resources(cls, category: ResourceCategory | None = None) -> list[CategorizedResource]:
        """
        The three global tables merged, optionally narrowed to one category.

        Order is handouts, clinical, billing; each table sorted by name.
        """
        loaders = {
            ResourceCategory.HANDOUTS: cls.get_patient_handouts,
            ResourceCategory.CLINICAL: cls.get_clinical_guidelines,
            ResourceCategory.BILLING: cls.get_medical_billing_resources,
        }

        resources: list[CategorizedResource] = []
        for cat, loader in loaders.items():
            if category is not None and cat != category:
                continue
            for row in loader():
                resources.append(
                    CategorizedResource(
                        **row.model_dump(),
                        category=cat,
                        file_url=public_url(LIBRARY_BUCKET, row.file_path) or None,
                    )
                )
        return resources

    # -------------------------------------------------------------------------
    # Member catalog
    # -------------------------------------------------------------------------

    @staticmethod
    def _program_files(program: Program) -> list[LibraryFile]:
        files = []
        for table, category in PROGRAM_TABLES:
            order = "sort_order" if table == "training_modules" else "name"
            for row in fetch(table, filters={"program_id": program.id}, order=order):
                files.append(_library_file(ProgramFile(**row), category, PROGRAMS_BUCKET, program.slug))
        return files

    @classmethod
    def build_catalog(cls, program: str | None = None) -> list[LibraryFile]:
        """
        Every downloadable file visible to members.

        Args:
            program: Only include this program's files (global tables are
                always included). None includes every program.

        Raises:
            SupabaseNotConfiguredError: If Supabase credentials are missing
            UpstreamServiceError: If a query fails
        """
        files: list[LibraryFile] = []

        for table, model, _, category in GLOBAL_TABLES:
            for row in fetch(table, order="name"):
                files.append(_library_file(model(**row), category, LIBRARY_BUCKET))

        if program:
            found = ProgramService.get_by_slug(program)
            programs = [found] if found else []
        else:
            programs = ProgramService.get_all()

        for prog in programs:
            files.extend(cls._program_files(prog))

        logger.debug(f"Built catalog with {len(files)} files (program={program!r})")
        return files

    @staticmethod
    def filter_catalog(items: Iterable[LibraryFile], filters: LibraryFilter) -> list[LibraryFile]:
        """
        Apply quick card, facets and search, then sort by title.

        Facet values are OR-ed within a group; groups are AND-ed.
        """
        out = list(items)

        quick = filters.quick
        if quick == QuickCard.VIDEOS:
            out = [r for r in out if r.type_tag == FileType.VIDEO]
        elif quick == QuickCard.HANDOUTS:
            out = [r for r in out if r.category == CategoryTag.HANDOUTS]
        elif quick == QuickCard.GUIDELINES:
            out = [r for r in out if r.category == CategoryTag.GUIDELINES]
        elif quick == QuickCard.BILLING:
            out = [r for r in out if r.category == CategoryTag.BILLING]
        elif quick == QuickCard.PROGRAM:
            out = [r for r in out if r.program]

        if filters.types:
            out = [r for r in out if r.type_tag in filters.types]
        if filters.categories:
            out = [r for r in out if r.category in filters.categories]
        if filters.programs:
            out = [r for r in out if r.program and r.program in filters.programs]

        search = filters.q.strip().lower()
        if search:
            out = [r for r in out if search in r.title.lower() or search in r.filename.lower()]

        return sorted(out, key=lambda r: r.title.lower())
