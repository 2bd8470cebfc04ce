# =============================================================================
# tests/test_program_service.py - Supabase Program Service Tests
# =============================================================================
# Service tests patch SupabaseClient.fetch_rows; client tests use a MagicMock
# query chain. No database calls are made.
# =============================================================================

from unittest.mock import MagicMock, patch

import pytest

from app.config import settings
from app.exceptions import SupabaseNotConfiguredError, UpstreamServiceError
from core.models.program import TrainingModule
from core.services.program_service import PROGRAMS_BUCKET, ProgramService, fetch, public_url
from lib.supabase_client import SupabaseClient, SupabaseClientError, SupabaseNotConfigured

PROGRAM_ROW = {
    "id": "prog-1",
    "slug": "timemymeds",
    "name": "TimeMyMeds",
    "description": "Med sync",
    "overview": "Sync refills.",
    "experience_level": "Beginner",
}


def fake_tables(tables: dict):
    """fetch_rows replacement: equality filters + limit over in-memory rows."""

    def fetch_rows(table, filters=None, order=None, desc=False, limit=None, columns="*"):
        rows = [r for r in tables.get(table, []) if all(r.get(k) == v for k, v in (filters or {}).items())]
        if order:
            rows = sorted(rows, key=lambda r: r.get(order) or 0)
        return rows[:limit] if limit else rows

    return fetch_rows


class TestPublicUrl:
    """Test public Storage URLs."""

    def test_builds_storage_url(self):
        """Test the public Storage URL."""
        url = public_url(PROGRAMS_BUCKET, "/clinical-programs/timemymeds/intro.mp4")

        assert url == (
            "https://test-project.supabase.co/storage/v1/object/public/"
            "clinical-programs/clinical-programs/timemymeds/intro.mp4"
        )

    def test_empty_without_path(self):
        """Test rows without a file path."""
        assert public_url(PROGRAMS_BUCKET, None) == ""
        assert public_url(PROGRAMS_BUCKET, "") == ""

    def test_empty_without_supabase_url(self, monkeypatch):
        """Test without a Supabase URL."""
        monkeypatch.setattr(settings, "SUPABASE_URL", "")

        assert public_url(PROGRAMS_BUCKET, "a.pdf") == ""


class TestFetch:
    """Test error mapping around SupabaseClient.fetch_rows."""

    def test_not_configured(self):
        """Test reads without Supabase credentials."""
        with patch.object(SupabaseClient, "fetch_rows", side_effect=SupabaseNotConfigured()):
            with pytest.raises(SupabaseNotConfiguredError):
                fetch("programs")

    def test_query_failure(self):
        """Test a failed query."""
        with patch.object(SupabaseClient, "fetch_rows", side_effect=SupabaseClientError("relation missing")):
            with pytest.raises(UpstreamServiceError) as exc_info:
                fetch("programs")

        assert exc_info.value.details == {"service": "supabase"}


class TestProgramService:
    """Test program reads and bundle assembly."""

    @pytest.fixture
    def tables(self):
        return {
            "programs": [PROGRAM_ROW, {"id": "prog-2", "slug": "test-treat", "name": "Test & Treat"}],
            "training_modules": [
                {"id": "m2", "program_id": "prog-1", "name": "Second", "sort_order": 2, "file_path": "cp/m2.mp4"},
                {"id": "m1", "program_id": "prog-1", "name": "First", "sort_order": 1, "link": "https://vimeo.test/1"},
                {"id": "m3", "program_id": "prog-2", "name": "Other program", "sort_order": 1},
            ],
            "protocol_manuals": [{"id": "p1", "program_id": "prog-1", "name": "Manual", "file_path": "cp/manual.pdf"}],
            "documentation_forms": [{"id": "f1", "program_id": "prog-1", "name": "Intake", "category": "Enrollment"}],
            "additional_resources": [],
        }

    def test_get_by_slug(self, tables):
        """Test reading one program by slug."""
        with patch.object(SupabaseClient, "fetch_rows", side_effect=fake_tables(tables)) as mock_fetch:
            program = ProgramService.get_by_slug("timemymeds")

        assert program.name == "TimeMyMeds"
        mock_fetch.assert_called_once_with("programs", filters={"slug": "timemymeds"}, limit=1)

    def test_get_by_slug_missing(self, tables):
        """Test an unknown slug."""
        with patch.object(SupabaseClient, "fetch_rows", side_effect=fake_tables(tables)):
            assert ProgramService.get_by_slug("nope") is None

    def test_get_all(self, tables):
        """Test reading all programs."""
        with patch.object(SupabaseClient, "fetch_rows", side_effect=fake_tables(tables)):
            programs = ProgramService.get_all()

        assert [p.slug for p in programs] == ["test-treat", "timemymeds"]

    def test_program_detail_bundle(self, tables):
        """Test the program bundle with child rows."""
        with patch.object(SupabaseClient, "fetch_rows", side_effect=fake_tables(tables)):
            bundle = ProgramService.get_program_detail("timemymeds")

        assert [m.id for m in bundle.modules] == ["m1", "m2"]
        assert bundle.modules[0].file_url is None
        assert bundle.modules[0].href == "https://vimeo.test/1"
        assert bundle.modules[1].file_url.endswith("/clinical-programs/cp/m2.mp4")
        assert bundle.forms[0].category == "Enrollment"
        assert bundle.section_counts == {"training": 2, "protocols": 1, "forms": 1, "resources": 0}

    def test_program_detail_null_columns(self, tables):
        """Test that null names, program ids and sort orders render blank."""
        tables["programs"][0] = {**PROGRAM_ROW, "name": None}
        tables["training_modules"] = [
            {"id": "m2", "program_id": "prog-1", "name": "Second", "sort_order": 2},
            {"id": "m1", "program_id": "prog-1", "name": None, "sort_order": None},
        ]
        tables["documentation_forms"] = [{"id": "f1", "program_id": "prog-1", "name": None, "category": None}]

        with patch.object(SupabaseClient, "fetch_rows", side_effect=fake_tables(tables)):
            bundle = ProgramService.get_program_detail("timemymeds")

        assert bundle.program.name == ""
        assert [(m.id, m.name, m.sort_order) for m in bundle.modules] == [("m1", "", 0), ("m2", "Second", 2)]
        assert bundle.forms[0].name == ""

        orphan = TrainingModule(id="m9", program_id=None, name=None, sort_order=None)
        assert (orphan.program_id, orphan.name, orphan.sort_order) == ("", "", 0)

    def test_program_detail_unknown_slug(self, tables):
        """Test the bundle for an unknown slug."""
        with patch.object(SupabaseClient, "fetch_rows", side_effect=fake_tables(tables)):
            assert ProgramService.get_program_detail("nope") is None

    def test_meta_prefers_row(self):
        """Test that row metadata wins."""
        from core.models.program import Program

        meta = ProgramService.get_meta("timemymeds", Program(**PROGRAM_ROW))

        assert meta.name == "TimeMyMeds"
        assert meta.overview == "Sync refills."

    def test_meta_falls_back_to_static_copy(self):
        """Test fallback metadata for known slugs."""
        from core.content import FALLBACK_PROGRAM_META

        slug = next(iter(FALLBACK_PROGRAM_META))

        assert ProgramService.get_meta(slug) == FALLBACK_PROGRAM_META[slug]
        assert ProgramService.get_meta("not-a-program") is None


class TestSupabaseClientQueries:
    """Test the query chain SupabaseClient.fetch_rows builds."""

    @pytest.fixture
    def supabase(self):
        mock_client = MagicMock()
        SupabaseClient._instance = mock_client
        yield mock_client
        SupabaseClient.reset()

    def test_filters_order_limit(self, supabase):
        """Test the filter, order and limit chain."""
        query = supabase.table.return_value.select.return_value
        query.eq.return_value = query
        query.order.return_value = query
        query.limit.return_value = query
        query.execute.return_value = MagicMock(data=[{"id": "m1"}])

        rows = SupabaseClient.fetch_rows(
            "training_modules",
            filters={"program_id": "prog-1"},
            order="sort_order",
            limit=5,
        )

        assert rows == [{"id": "m1"}]
        supabase.table.assert_called_once_with("training_modules")
        query.eq.assert_called_once_with("program_id", "prog-1")
        query.order.assert_called_once_with("sort_order", desc=False)
        query.limit.assert_called_once_with(5)

    def test_none_data_is_empty_list(self, supabase):
        """Test a response without data."""
        supabase.table.return_value.select.return_value.execute.return_value = MagicMock(data=None)

        assert SupabaseClient.fetch_rows("programs") == []

    def test_query_error_wrapped(self, supabase):
        """Test that query errors are wrapped."""
        supabase.table.side_effect = RuntimeError("relation does not exist")

        with pytest.raises(SupabaseClientError) as exc_info:
            SupabaseClient.fetch_rows("programs")

        assert exc_info.value.code == "FETCH_ROWS_FAILED"

    def test_fetch_one(self, supabase):
        """Test fetch_one with no match."""
        query = supabase.table.return_value.select.return_value
        query.eq.return_value = query
        query.limit.return_value = query
        query.execute.return_value = MagicMock(data=[])

        assert SupabaseClient.fetch_one("programs", {"slug": "nope"}) is None

    def test_not_configured(self, monkeypatch):
        """Test the client without an anon key."""
        SupabaseClient.reset()
        monkeypatch.setattr(settings, "SUPABASE_ANON_KEY", "")

        with pytest.raises(SupabaseNotConfigured):
            SupabaseClient.get_client()
