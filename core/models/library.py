# =============================================================================
# core/models/library.py - Resource Library Schemas
# =============================================================================
# Models for the unified Resource Library:
# - ResourceLibraryItem: one row of GET /api/resource-library (Airtable proxy)
# - PatientHandout / ClinicalGuideline / MedicalBillingResource: Supabase rows
# - LibraryFile / LibraryFilter: the member-facing catalog and its filters
# =============================================================================

from enum import Enum

from pydantic import BaseModel, Field, field_validator


class ResourceCategory(str, Enum):
    """Categories used by the Airtable-backed library endpoint."""
    HANDOUTS = "handouts"
    CLINICAL = "clinical"
    BILLING = "billing"


class ResourceLibraryItem(BaseModel):
    """
    One library entry.

    Example:
        {"id": "rec123", "name": "A1c Handout", "url": "https://...", "category": "handouts"}
    """
    id: str
    name: str = ""
    url: str | None = None
    category: ResourceCategory


class ResourceLibraryResponse(BaseModel):
    items: list[ResourceLibraryItem] = Field(default_factory=list)


# =============================================================================
# Supabase rows
# =============================================================================

class LibraryRow(BaseModel):
    id: str
    name: str = ""
    file_path: str | None = None
    file_size: int | None = None
    link: str | None = None
    created_at: str | None = None
    updated_at: str | None = None

    @field_validator("name", mode="before")
    @classmethod
    def null_name_is_blank(cls, v):
        """PostgREST sends null for empty columns; render those blank."""
        return "" if v is None else v


class PatientHandout(LibraryRow):
    pass


class ClinicalGuideline(LibraryRow):
    pass


class MedicalBillingResource(LibraryRow):
    pass


class CategorizedResource(LibraryRow):
    """A library row tagged with its source category."""
    category: ResourceCategory
    file_url: str | None = None


# =============================================================================
# Member catalog
# =============================================================================

class CategoryTag(str, Enum):
    """Finer-grained category used by the member catalog."""
    HANDOUTS = "handouts"
    GUIDELINES = "guidelines"
    BILLING = "billing"
    FORMS = "forms"
    PROTOCOLS = "protocols"
    RESOURCES = "resources"
    TRAINING = "training"
    UNKNOWN = "unknown"

    @property
    def label(self) -> str:
        return CATEGORY_LABELS[self]


CATEGORY_LABELS: dict[CategoryTag, str] = {
    CategoryTag.HANDOUTS: "Handouts",
    CategoryTag.GUIDELINES: "Guidelines",
    CategoryTag.BILLING: "Billing",
    CategoryTag.FORMS: "Forms",
    CategoryTag.PROTOCOLS: "Protocols",
    CategoryTag.RESOURCES: "Resources",
    CategoryTag.TRAINING: "Training",
    CategoryTag.UNKNOWN: "Other",
}


class FileType(str, Enum):
    PDF = "pdf"
    DOC = "doc"
    SHEET = "sheet"
    VIDEO = "video"
    OTHER = "other"


class QuickCard(str, Enum):
    """Quick-filter cards above the catalog table."""
    ALL = "all"
    HANDOUTS = "handouts"
    GUIDELINES = "guidelines"
    BILLING = "billing"
    PROGRAM = "program"
    VIDEOS = "videos"


class LibraryFile(BaseModel):
    """One downloadable file in the member catalog."""
    id: str
    title: str = ""
    filename: str = ""
    path: str = ""
    url: str | None = None
    category: CategoryTag = CategoryTag.UNKNOWN
    program: str | None = None
    type_tag: FileType = FileType.OTHER
    size: int | None = None
    size_label: str | None = None


class LibraryFilter(BaseModel):
    """
    Catalog filter state.

    Within each of types / categories / programs the selected values are
    OR-ed; the groups themselves are AND-ed.
    """
    quick: QuickCard = QuickCard.ALL
    types: list[FileType] = Field(default_factory=list)
    categories: list[CategoryTag] = Field(default_factory=list)
    programs: list[str] = Field(default_factory=list)
    q: str = ""
