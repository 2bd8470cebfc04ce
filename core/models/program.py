# =============================================================================
# core/models/program.py - Program Schemas
# =============================================================================
# Two families of program models live here:
#
# 1. Airtable-shaped DTOs returned by GET /api/clinical-programs. Field names
#    mirror the Airtable columns (programSlug, moduleName, ...) so the JSON the
#    browser sees matches the base one-to-one.
#
# 2. Supabase row models for the migrated tables (programs, training_modules,
#    ...). These use the snake_case column names of the Postgres mirror.
#
# Nothing here enforces cross-entity rules: a module "belongs" to a program
# only through a slug / program_id match evaluated by the data store.
# =============================================================================

from pydantic import BaseModel, Field, field_validator


# =============================================================================
# Airtable-shaped DTOs
# =============================================================================

class ProgramListItem(BaseModel):
    """
    Compact program row for listings.

    Example:
        {
            "programSlug": "timemymeds",
            "programName": "TimeMyMeds",
            "programDescription": "Appointment-based synchronization...",
            "experienceLevel": "Beginner"
        }
    """
    programSlug: str = ""
    programName: str = ""
    programDescription: str = ""
    # Left out of the JSON when the cell is empty
    experienceLevel: str | None = None


class ProgramList(BaseModel):
    """Response for list mode. `items` is [] when the table is empty."""
    items: list[ProgramListItem] = Field(default_factory=list)


class TrainingModuleItem(BaseModel):
    id: str
    moduleName: str = ""
    moduleLength: str | None = None
    moduleLink: str | None = None
    moduleFileUrl: str | None = None


class ProtocolManualItem(BaseModel):
    id: str
    protocolName: str = ""
    # fileLink wins over the attachment URL
    protocolFileUrl: str | None = None


class DocumentationFormItem(BaseModel):
    id: str
    formName: str = ""
    formCategory: str | None = None
    formLink: str | None = None
    formFileUrl: str | None = None


class AdditionalResourceItem(BaseModel):
    id: str
    resourceName: str = ""
    resourceLink: str | None = None
    resourceFileUrl: str | None = None


class ProgramDetail(BaseModel):
    """
    Full program detail for GET /api/clinical-programs?programSlug=...

    programOverviewParagraphs is derived from programOverview by splitting
    on blank lines / newlines.
    """
    programSlug: str
    programName: str = ""
    programDescription: str = ""
    programOverview: str = ""
    programOverviewParagraphs: list[str] = Field(default_factory=list)
    experienceLevel: str | None = None
    trainingModules: list[TrainingModuleItem] = Field(default_factory=list)
    protocolManuals: list[ProtocolManualItem] = Field(default_factory=list)
    documentationForms: list[DocumentationFormItem] = Field(default_factory=list)
    additionalResources: list[AdditionalResourceItem] = Field(default_factory=list)


# =============================================================================
# Supabase row models
# =============================================================================

class Program(BaseModel):
    """Row of the `programs` table."""
    id: str
    slug: str = ""
    name: str = ""
    description: str | None = None
    overview: str | None = None
    experience_level: str | None = None
    created_at: str | None = None
    updated_at: str | None = None

    @field_validator("slug", "name", mode="before")
    @classmethod
    def null_text_is_blank(cls, v):
        """PostgREST sends null for empty columns."""
        return "" if v is None else v


class ProgramFile(BaseModel):
    """
    Common shape of the program child tables.

    file_url is filled in by the service from file_path + storage bucket.
    """
    id: str
    program_id: str = ""
    name: str = ""
    file_path: str | None = None
    file_size: int | None = None
    link: str | None = None
    file_url: str | None = None
    created_at: str | None = None
    updated_at: str | None = None

    @field_validator("program_id", "name", mode="before")
    @classmethod
    def null_text_is_blank(cls, v):
        return "" if v is None else v

    @property
    def href(self) -> str | None:
        """Where a download button should point: explicit link, else storage URL."""
        return self.link or self.file_url


class TrainingModule(ProgramFile):
    length: str | None = None
    sort_order: int = 0

    @field_validator("sort_order", mode="before")
    @classmethod
    def null_sort_order_is_zero(cls, v):
        """Unordered modules sort first."""
        return 0 if v is None else v


class ProtocolManual(ProgramFile):
    pass


class DocumentationForm(ProgramFile):
    category: str | None = None


class AdditionalResource(ProgramFile):
    pass


class ProgramMeta(BaseModel):
    """Minimal metadata for a program overview (DB row or static fallback)."""
    name: str
    description: str | None = None
    overview: str | None = None


class ProgramBundle(BaseModel):
    """A program with all related rows, as assembled by ProgramService."""
    program: Program
    modules: list[TrainingModule] = Field(default_factory=list)
    manuals: list[ProtocolManual] = Field(default_factory=list)
    forms: list[DocumentationForm] = Field(default_factory=list)
    resources: list[AdditionalResource] = Field(default_factory=list)

    @property
    def section_counts(self) -> dict[str, int]:
        return {
            "training": len(self.modules),
            "protocols": len(self.manuals),
            "forms": len(self.forms),
            "resources": len(self.resources),
        }
