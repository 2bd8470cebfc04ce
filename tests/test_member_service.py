# =============================================================================
# tests/test_member_service.py - Bookmarks, Activity & Dashboard Tests
# =============================================================================

from unittest.mock import MagicMock

import pytest

from app.exceptions import UpstreamServiceError
from core.content import DEMO_BOOKMARKS
from core.models.member import MemberInfo
from core.models.program import ProgramList, ProgramListItem
from core.services.clinical_program_service import ClinicalProgramService
from core.services.member_service import PROGRAMS_ERROR, DashboardService, MemberActivityStore


@pytest.fixture
def store():
    return MemberActivityStore()


class TestBookmarks:
    """Test in-memory bookmarks."""

    def test_add_and_list(self, store):
        """Test adding and listing bookmarks."""
        bookmark = store.add_bookmark("1", "handout", "recH1")

        assert bookmark.user_id == "1"
        assert store.list_bookmarks("1") == [bookmark]
        assert store.list_bookmarks("2") == []

    def test_duplicate_returns_existing(self, store):
        """Test that a duplicate bookmark is not added twice."""
        first = store.add_bookmark("1", "handout", "recH1")
        second = store.add_bookmark("1", "handout", "recH1")

        assert second.id == first.id
        assert len(store.list_bookmarks("1")) == 1

    def test_remove(self, store):
        """Test removing a bookmark."""
        store.add_bookmark("1", "handout", "recH1")
        store.add_bookmark("1", "form", "recF1")

        assert store.remove_bookmark("1", "handout", "recH1") is True
        assert store.remove_bookmark("1", "handout", "recH1") is False
        assert [b.resource_id for b in store.list_bookmarks("1")] == ["recF1"]


class TestActivity:
    """Test in-memory recent activity."""

    def test_newest_first_with_limit(self, store):
        """Test activity order and limit."""
        for name in ["first", "second", "third"]:
            store.log_activity("1", name, "handout")

        assert [a.resource_name for a in store.recent_activity("1")] == ["third", "second", "first"]
        assert [a.resource_name for a in store.recent_activity("1", limit=2)] == ["third", "second"]

    def test_clear(self, store):
        """Test clearing the store."""
        store.log_activity("1", "x", "handout")
        store.add_bookmark("1", "handout", "recH1")

        store.clear()

        assert store.recent_activity("1") == []
        assert store.list_bookmarks("1") == []


class TestDashboardService:
    """Test dashboard assembly."""

    MEMBER = MemberInfo(id="1", pharmacyName="Demo User", subscriptionStatus="Active")

    def test_programs_loaded(self, store):
        """Test the dashboard with programs."""
        programs = MagicMock(spec=ClinicalProgramService)
        programs.list_programs.return_value = ProgramList(items=[ProgramListItem(programSlug="timemymeds")])

        dashboard = DashboardService(programs, store).get_dashboard(self.MEMBER)

        assert [p.programSlug for p in dashboard.programs] == ["timemymeds"]
        assert dashboard.programsError is None
        assert dashboard.quickAccess
        assert dashboard.announcements

    def test_program_failure_sets_error(self, store):
        """Test the dashboard when programs fail to load."""
        programs = MagicMock(spec=ClinicalProgramService)
        programs.list_programs.side_effect = UpstreamServiceError("airtable")

        dashboard = DashboardService(programs, store).get_dashboard(self.MEMBER)

        assert dashboard.programs == []
        assert dashboard.programsError == PROGRAMS_ERROR
        assert dashboard.member.id == "1"

    def test_demo_tiles_when_member_has_no_data(self, store):
        """Test demo bookmarks and activity."""
        programs = MagicMock(spec=ClinicalProgramService)
        programs.list_programs.return_value = ProgramList()

        dashboard = DashboardService(programs, store).get_dashboard(self.MEMBER)

        assert dashboard.bookmarks == list(DEMO_BOOKMARKS)
        assert [a.id for a in dashboard.recentActivity] == ["ra-1", "ra-2", "ra-3"]

    def test_member_data_replaces_demo_tiles(self, store):
        """Test that member data replaces the demo tiles."""
        programs = MagicMock(spec=ClinicalProgramService)
        programs.list_programs.return_value = ProgramList()
        store.add_bookmark("1", "handout", "recH1", resource_name="A1c Handout", program="TimeMyMeds", url="https://x/a1c.pdf")
        store.log_activity("1", "CMR Guide", "mtm")

        dashboard = DashboardService(programs, store).get_dashboard(self.MEMBER)

        assert [(b.name, b.program, b.url) for b in dashboard.bookmarks] == [
            ("A1c Handout", "TimeMyMeds", "https://x/a1c.pdf")
        ]
        assert [a.name for a in dashboard.recentActivity] == ["CMR Guide"]

    def test_bookmark_without_name_shows_resource_id(self, store):
        """Test that an unnamed bookmark is labelled by id with no program."""
        programs = MagicMock(spec=ClinicalProgramService)
        programs.list_programs.return_value = ProgramList()
        store.add_bookmark("1", "handout", "recH1")

        dashboard = DashboardService(programs, store).get_dashboard(self.MEMBER)

        assert [(b.name, b.program) for b in dashboard.bookmarks] == [("recH1", None)]
