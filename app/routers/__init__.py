# =============================================================================
# app/routers/ - API Route Definitions
# =============================================================================
# This package contains FastAPI routers organized by feature:
# - health.py: Health check endpoints
# - clinical_programs.py: GET /api/clinical-programs (Airtable)
# - resource_library.py: GET /api/resource-library (Airtable)
# - programs.py: Program catalog from Supabase (members)
# - library.py: Resource library and catalog from Supabase (members)
# - members.py: Dashboard, bookmarks and activity (members)
# - dev.py: Airtable diagnostics and credential setup (non-production)
# - pages.py: Server-rendered HTML pages
#
# Each router is mounted in main.py with a URL prefix.
# =============================================================================

from . import health
from . import clinical_programs
from . import resource_library
from . import programs
from . import library
from . import members
from . import dev
from . import pages

__all__ = [
    "health",
    "clinical_programs",
    "resource_library",
    "programs",
    "library",
    "members",
    "dev",
    "pages",
]
