# =============================================================================
# core/models/ - Pydantic Data Models
# =============================================================================
# This package contains Pydantic schemas for data validation:
# - program.py: Airtable-shaped program DTOs + Supabase program rows
# - library.py: Resource Library rows, catalog files and filters
# - member.py: Mocked user, dashboard tiles, bookmarks and activity
#
# These models define the "contract" between API and clients.
# =============================================================================

# -----------------------------------------------------------------------------
# Program Models
# -----------------------------------------------------------------------------
from .program import (
    AdditionalResource,
    AdditionalResourceItem,
    DocumentationForm,
    DocumentationFormItem,
    Program,
    ProgramBundle,
    ProgramDetail,
    ProgramFile,
    ProgramList,
    ProgramListItem,
    ProgramMeta,
    ProtocolManual,
    ProtocolManualItem,
    TrainingModule,
    TrainingModuleItem,
)

# -----------------------------------------------------------------------------
# Library Models
# -----------------------------------------------------------------------------
from .library import (
    CategorizedResource,
    CategoryTag,
    ClinicalGuideline,
    FileType,
    LibraryFile,
    LibraryFilter,
    MedicalBillingResource,
    PatientHandout,
    QuickCard,
    ResourceCategory,
    ResourceLibraryItem,
    ResourceLibraryResponse,
)

# -----------------------------------------------------------------------------
# Member Models
# -----------------------------------------------------------------------------
from .member import (
    ActivityCreate,
    ActivityItem,
    Announcement,
    Bookmark,
    BookmarkCreate,
    Dashboard,
    MemberInfo,
    Profile,
    QuickAccessItem,
    RecentActivity,
    ResourceItem,
    Subscription,
    SubscriptionStatus,
    User,
)

__all__ = [
    # Program
    "AdditionalResource",
    "AdditionalResourceItem",
    "DocumentationForm",
    "DocumentationFormItem",
    "Program",
    "ProgramBundle",
    "ProgramDetail",
    "ProgramFile",
    "ProgramList",
    "ProgramListItem",
    "ProgramMeta",
    "ProtocolManual",
    "ProtocolManualItem",
    "TrainingModule",
    "TrainingModuleItem",
    # Library
    "CategorizedResource",
    "CategoryTag",
    "ClinicalGuideline",
    "FileType",
    "LibraryFile",
    "LibraryFilter",
    "MedicalBillingResource",
    "PatientHandout",
    "QuickCard",
    "ResourceCategory",
    "ResourceLibraryItem",
    "ResourceLibraryResponse",
    # Member
    "ActivityCreate",
    "ActivityItem",
    "Announcement",
    "Bookmark",
    "BookmarkCreate",
    "Dashboard",
    "MemberInfo",
    "Profile",
    "QuickAccessItem",
    "RecentActivity",
    "ResourceItem",
    "Subscription",
    "SubscriptionStatus",
    "User",
]
