# =============================================================================
# core/services/member_service.py - Member Bookmarks, Activity & Dashboard
# =============================================================================
# Member data is held in process memory, keyed by member id. Nothing is
# persisted: a restart clears every bookmark and activity entry.
# =============================================================================

import logging
import threading
from collections import defaultdict
from uuid import uuid4

from app.exceptions import ClinicalRxQException
from core.content import DEMO_BOOKMARKS, QUICK_ACCESS, get_announcements, get_demo_activity
from core.models.member import (
    ActivityItem,
    Bookmark,
    Dashboard,
    MemberInfo,
    RecentActivity,
    ResourceItem,
)
from core.services.clinical_program_service import ClinicalProgramService
from lib.utils import utc_now_iso

logger = logging.getLogger(__name__)

PROGRAMS_ERROR = "Error loading programs"
RECENT_ACTIVITY_LIMIT = 10


class MemberActivityStore:
    """In-memory bookmarks and recent activity per member."""

    def __init__(self):
        self._lock = threading.Lock()
        self._bookmarks: dict[str, list[Bookmark]] = defaultdict(list)
        self._activity: dict[str, list[RecentActivity]] = defaultdict(list)

    # -------------------------------------------------------------------------
    # Bookmarks
    # -------------------------------------------------------------------------

    def list_bookmarks(self, member_id: str) -> list[Bookmark]:
        with self._lock:
            return list(self._bookmarks.get(member_id, []))

    def add_bookmark(
        self,
        member_id: str,
        resource_type: str,
        resource_id: str,
        resource_name: str | None = None,
        program: str | None = None,
        url: str | None = None,
    ) -> Bookmark:
        """
        Bookmark a resource.

        Adding the same (resource_type, resource_id) twice returns the
        existing bookmark unchanged.
        """
        with self._lock:
            for existing in self._bookmarks[member_id]:
                if existing.resource_type == resource_type and existing.resource_id == resource_id:
                    return existing

            bookmark = Bookmark(
                id=str(uuid4()),
                user_id=member_id,
                resource_type=resource_type,
                resource_id=resource_id,
                created_at=utc_now_iso(),
                resource_name=resource_name,
                program=program,
                url=url,
            )
            self._bookmarks[member_id].append(bookmark)
            logger.info(f"Member {member_id} bookmarked {resource_type}/{resource_id}")
            return bookmark

    def remove_bookmark(self, member_id: str, resource_type: str, resource_id: str) -> bool:
        """Returns True if a bookmark was removed."""
        with self._lock:
            items = self._bookmarks.get(member_id, [])
            kept = [b for b in items if not (b.resource_type == resource_type and b.resource_id == resource_id)]
            removed = len(kept) != len(items)
            self._bookmarks[member_id] = kept
            return removed

    # -------------------------------------------------------------------------
    # Activity
    # -------------------------------------------------------------------------

    def log_activity(self, member_id: str, resource_name: str, resource_type: str) -> RecentActivity:
        entry = RecentActivity(
            id=str(uuid4()),
            user_id=member_id,
            resource_name=resource_name,
            resource_type=resource_type,
            accessed_at=utc_now_iso(),
        )
        with self._lock:
            self._activity[member_id].append(entry)
        return entry

    def recent_activity(self, member_id: str, limit: int = RECENT_ACTIVITY_LIMIT) -> list[RecentActivity]:
        """Newest first."""
        with self._lock:
            entries = list(self._activity.get(member_id, []))
        return list(reversed(entries))[:limit]

    def clear(self) -> None:
        with self._lock:
            self._bookmarks.clear()
            self._activity.clear()


# Process-wide store used by the API and pages
activity_store = MemberActivityStore()


class DashboardService:
    """Assembles the member dashboard."""

    def __init__(
        self,
        programs: ClinicalProgramService | None = None,
        store: MemberActivityStore | None = None,
    ):
        self.programs = programs or ClinicalProgramService()
        self.store = store or activity_store

    def _bookmarks(self, member_id: str) -> list[ResourceItem]:
        saved = self.store.list_bookmarks(member_id)
        if not saved:
            return list(DEMO_BOOKMARKS)
        # Bookmarks saved without a display name fall back to their resource id
        return [
            ResourceItem(id=b.id, name=b.resource_name or b.resource_id, program=b.program, url=b.url)
            for b in saved
        ]

    def _activity(self, member_id: str) -> list[ActivityItem]:
        entries = self.store.recent_activity(member_id)
        if not entries:
            return get_demo_activity()
        return [
            ActivityItem(id=a.id, name=a.resource_name, program=a.resource_type, accessedAtISO=a.accessed_at)
            for a in entries
        ]

    def get_dashboard(self, member: MemberInfo) -> Dashboard:
        """
        Everything the dashboard renders.

        A program-list failure is reported through programsError; the rest
        of the dashboard is still returned.
        """
        dashboard = Dashboard(
            member=member,
            quickAccess=list(QUICK_ACCESS),
            bookmarks=self._bookmarks(member.id),
            recentActivity=self._activity(member.id),
            announcements=get_announcements(),
        )

        try:
            dashboard.programs = self.programs.list_programs().items
        except ClinicalRxQException as e:
            logger.warning(f"Dashboard programs unavailable: {e.message}")
            dashboard.programsError = PROGRAMS_ERROR

        return dashboard
