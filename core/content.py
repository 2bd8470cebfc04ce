# =============================================================================
# core/content.py - Static Site Copy
# =============================================================================
# Marketing copy for the public pages plus the demo data the member dashboard
# shows until real integrations exist. Kept as plain data so templates and
# tests can use it without touching Airtable or Supabase.
# =============================================================================

from datetime import datetime, timedelta, timezone

from core.models.member import ActivityItem, Announcement, QuickAccessItem, ResourceItem
from core.models.program import ProgramMeta, ProgramListItem


# =============================================================================
# Programs
# =============================================================================

# Program slugs used as folder names in storage and in the member catalog
PROGRAM_SLUGS: tuple[str, ...] = (
    "mtmthefuturetoday",
    "timemymeds",
    "testandtreat",
    "hba1c",
    "oralcontraceptives",
)

# Shown when a program row is missing from the `programs` table
FALLBACK_PROGRAM_META: dict[str, ProgramMeta] = {
    "mtmthefuturetoday": ProgramMeta(
        name="MTM The Future Today",
        description="Team-based Medication Therapy Management with proven protocols and scalable results.",
    ),
    "timemymeds": ProgramMeta(
        name="TimeMyMeds",
        description="Appointment-based synchronization to enable consistent clinical service delivery.",
    ),
    "testandtreat": ProgramMeta(
        name="Test & Treat Services",
        description="Assessments, CLIA-waived testing, and treatment for flu, strep, and COVID-19.",
    ),
    "hba1c": ProgramMeta(
        name="HbA1c Testing",
        description="Training and resources for A1c point-of-care testing and quality metrics.",
    ),
    "oralcontraceptives": ProgramMeta(
        name="Pharmacist-Initiated Oral Contraceptives",
        description="From patient intake to billing and documentation, simplified step-by-step workflows.",
    ),
}

# Program cards on the home page when Airtable is unavailable
FEATURED_PROGRAMS: list[ProgramListItem] = [
    ProgramListItem(programSlug=slug, programName=meta.name, programDescription=meta.description or "")
    for slug, meta in FALLBACK_PROGRAM_META.items()
]


# =============================================================================
# About page
# =============================================================================

PILLARS: list[dict] = [
    {
        "title": "The Operational Flywheel",
        "description": "A self-reinforcing cycle of care and revenue",
        "details": [
            "TimeMyMeds creates predictable monthly appointments",
            "Protected time enables billable clinical services",
            "Revenue funds program expansion",
            "More patients = more clinical opportunities",
        ],
    },
    {
        "title": "Technician as Force Multiplier",
        "description": "Strategic elevation of the pharmacy technician",
        "details": [
            "Technicians manage MTM platforms and scheduling",
            "Handle all paperwork and documentation",
            "Process billing and claims submission",
            "Pharmacists focus exclusively on clinical care",
        ],
    },
    {
        "title": "Turnkey Clinical Infrastructure",
        "description": "Complete 'business-in-a-box' solution",
        "details": [
            "Step-by-step Standard Operating Procedures",
            "All necessary forms and worksheets",
            "Specific CPT, HCPCS, and ICD-10 codes",
            "Software platform navigation guides",
        ],
    },
]

DIFFERENTIATORS: list[dict] = [
    {
        "title": "Designed by Community Pharmacists",
        "description": "Every protocol was created and tested in real community pharmacy settings "
                       "by practicing pharmacists who understand your daily challenges.",
    },
    {
        "title": "Implementation, Not Just Education",
        "description": "We teach the 'how,' not just the 'what.' Complete operational toolkits "
                       "ensure you can launch services immediately and correctly.",
    },
    {
        "title": "Proven Financial Models",
        "description": "Each service includes detailed billing protocols and proven revenue models. "
                       "TimeMyMeds alone generates $75,000 per 100 patients enrolled.",
    },
    {
        "title": "Patient-Centered Approach",
        "description": "Transform from product-centric dispensing to patient-centered care that "
                       "improves outcomes and builds lasting relationships.",
    },
]


# =============================================================================
# Success stories
# =============================================================================

SUCCESS_STORIES: list[dict] = [
    {
        "name": "Dr. Sarah Johnson, PharmD",
        "role": "Owner, Community Care Pharmacy",
        "location": "Phoenix, AZ",
        "program": "MTM The Future Today",
        "story": "ClinicalRxQ transformed our practice. The team-based approach is genius - my "
                 "technicians are now clinical partners, not just dispensing assistants.",
        "achievements": [
            "40% improvement in clinical outcomes",
            "Reduced medication errors by 65%",
            "Improved patient satisfaction scores to 98%",
        ],
        "rating": 5,
    },
    {
        "name": "Dr. Michael Chen, PharmD",
        "role": "Clinical Pharmacist, Metro Health Pharmacy",
        "location": "Seattle, WA",
        "program": "TimeMyMeds + Test & Treat",
        "story": "TimeMyMeds created predictable appointments, and we layered Test & Treat "
                 "services during those visits. It's about transforming workflow.",
        "achievements": [
            "300+ patients enrolled in TimeMyMeds",
            "Launched point-of-care testing program",
            "Delivered 500+ clinical services",
        ],
        "rating": 5,
    },
    {
        "name": "Dr. Emily Rodriguez, PharmD",
        "role": "Pharmacy Manager",
        "location": "Austin, TX",
        "program": "Complete ClinicalRxQ Ecosystem",
        "story": "We adopted every program in sequence. The turnkey forms and billing codes "
                 "meant we launched services in weeks instead of months.",
        "achievements": ["Five clinical services live", "Technician-led documentation"],
        "rating": 5,
    },
    {
        "name": "Dr. Lisa Thompson, PharmD",
        "role": "Owner, Family Pharmacy",
        "location": "Columbus, OH",
        "program": "HbA1c Testing + MTM",
        "story": "Point-of-care A1c testing fit naturally into our MTM visits and gave "
                 "prescribers data they actually use.",
        "achievements": ["A1c testing integrated with MTM", "Stronger prescriber relationships"],
        "rating": 5,
    },
]


# =============================================================================
# Enrollment
# =============================================================================

ENROLLMENT_PROGRAMS: list[dict] = [
    {
        "id": "clinical-fundamentals",
        "title": "Clinical Pharmacy Fundamentals",
        "price": 299,
        "duration": "8 weeks",
        "features": [
            "Interactive online modules",
            "Live Q&A sessions",
            "Certification upon completion",
            "24/7 support access",
            "Downloadable resources",
        ],
    },
    {
        "id": "advanced-therapy",
        "title": "Advanced Drug Therapy Management",
        "price": 449,
        "duration": "12 weeks",
        "features": [
            "Advanced case studies",
            "Expert mentorship",
            "Research database access",
            "Peer networking opportunities",
            "Continuing education credits",
        ],
    },
    {
        "id": "pharmaceutical-care",
        "title": "Pharmaceutical Care Excellence",
        "price": 349,
        "duration": "10 weeks",
        "features": [
            "Patient care scenarios",
            "Communication skills training",
            "Quality metrics training",
            "Practice tools & templates",
            "Implementation guides",
        ],
    },
]


def get_enrollment_program(program_id: str) -> dict | None:
    for program in ENROLLMENT_PROGRAMS:
        if program["id"] == program_id:
            return program
    return None


# =============================================================================
# Member dashboard demo data
# =============================================================================

QUICK_ACCESS: list[QuickAccessItem] = [
    QuickAccessItem(id="qa-1", title="CMR Pharmacist Protocol", subtitle="MTM Protocols", cta="Download", icon="FileText"),
    QuickAccessItem(id="qa-2", title="Technician Training Module 1", subtitle="Onboarding", cta="Watch", icon="PlayCircle"),
    QuickAccessItem(id="qa-3", title="A1c Patient Handout", subtitle="Diabetes Care", cta="Download", icon="FileSpreadsheet"),
    QuickAccessItem(id="qa-4", title="Flu Test Workflow", subtitle="Test & Treat", cta="Download", icon="TestTubes"),
]

DEMO_BOOKMARKS: list[ResourceItem] = [
    ResourceItem(id="bm-1", name="MTM CMR Form (Pharmacist)", program="MTM"),
    ResourceItem(id="bm-2", name="Technician Protocol - Sync Calls", program="TMM"),
    ResourceItem(id="bm-3", name="A1c Testing Consent", program="A1C"),
    ResourceItem(id="bm-4", name="Strep Test Standing Order", program="TNT"),
]


def get_announcements(now: datetime | None = None) -> list[Announcement]:
    """Announcements dated relative to `now`."""
    now = now or datetime.now(timezone.utc)
    return [
        Announcement(
            id="an-1",
            title="New: Prescriber Communication Forms",
            body="Standardized outreach templates now available in all MTM programs.",
            dateISO=now.isoformat(),
        ),
        Announcement(
            id="an-2",
            title="Sync Workflow Update",
            body="Checklist updated for latest payer guidance. Please review by month end.",
            dateISO=(now - timedelta(days=4)).isoformat(),
        ),
    ]


def get_demo_activity(now: datetime | None = None) -> list[ActivityItem]:
    """Recent activity shown before a member has opened anything."""
    now = now or datetime.now(timezone.utc)
    return [
        ActivityItem(id="ra-1", name="CMR Interview Guide", program="MTM",
                     accessedAtISO=(now - timedelta(hours=1)).isoformat()),
        ActivityItem(id="ra-2", name="Sync Schedule Template", program="TMM",
                     accessedAtISO=(now - timedelta(hours=5)).isoformat()),
        ActivityItem(id="ra-3", name="A1c Tech Checklist", program="A1C",
                     accessedAtISO=(now - timedelta(hours=22)).isoformat()),
    ]
