# =============================================================================
# tests/test_airtable_client.py - Airtable REST Client Tests
# =============================================================================
# This module contains tests for:
# - Retry policy (429 fixed wait, 5xx backoff, shared retry budget)
# - Request spacing via RateLimiter
# - Pagination, page-size clamping and record-ID lookups
# - Credential override precedence and connectivity diagnostics
#
# HTTP is served by httpx.MockTransport; sleeps are recorded, never slept.
# =============================================================================

import json

import httpx
import pytest

from app.config import settings
from lib.airtable_client import (
    AirtableClientError,
    AirtableNotConfigured,
    RateLimiter,
    clear_credential_override,
    escape_formula_string,
    get_airtable_client,
    get_credentials,
    set_credential_override,
)


def responses(*items):
    """Handler that plays back (status, body) pairs in order."""
    queue = list(items)

    def handler(request: httpx.Request) -> httpx.Response:
        status, body = queue.pop(0)
        return httpx.Response(status, json=body)

    return handler


OK_PAGE = (200, {"records": [{"id": "rec1", "fields": {}}]})


# =============================================================================
# Retry policy
# =============================================================================

class TestRetryPolicy:
    """Test 429 / 5xx handling in send()."""

    def test_rate_limited_waits_thirty_seconds_once(self, make_airtable_client, sleeps):
        """Test that a 429 waits the fixed rate-limit delay before one retry."""
        client, seen = make_airtable_client(responses((429, {"error": "RATE_LIMIT"}), OK_PAGE))

        page = client.list_records("ClinicalPrograms")

        assert [r["id"] for r in page["records"]] == ["rec1"]
        assert sleeps.calls == [30.0]
        assert len(seen) == 2

    def test_server_errors_back_off_exponentially(self, make_airtable_client, sleeps):
        """Test 5xx backoff of 0.5s then 1s."""
        client, seen = make_airtable_client(responses((503, {}), (502, {}), OK_PAGE))

        client.list_records("ClinicalPrograms")

        assert sleeps.calls == [0.5, 1.0]
        assert len(seen) == 3

    def test_server_error_budget_exhausted_raises(self, make_airtable_client, sleeps):
        """Test that 5xx past the retry budget raises."""
        client, seen = make_airtable_client(responses((503, {}), (503, {}), (503, {"error": "down"})))

        with pytest.raises(AirtableClientError) as exc_info:
            client.list_records("ClinicalPrograms")

        assert exc_info.value.status_code == 503
        assert sleeps.calls == [0.5, 1.0]
        assert len(seen) == 3

    def test_429_and_5xx_share_one_budget(self, make_airtable_client, sleeps):
        """Test that rate limits and server errors draw from the same budget."""
        client, seen = make_airtable_client(responses((429, {}), (500, {}), (500, {})))

        with pytest.raises(AirtableClientError):
            client.list_records("ClinicalPrograms")

        # Second retry uses the doubled backoff because attempt 1 was the 429
        assert sleeps.calls == [30.0, 1.0]
        assert len(seen) == 3

    def test_repeated_429_gives_up_after_budget(self, make_airtable_client, sleeps):
        """Test giving up after repeated 429s."""
        client, seen = make_airtable_client(responses((429, {}), (429, {}), (429, {})))

        with pytest.raises(AirtableClientError) as exc_info:
            client.list_records("ClinicalPrograms")

        assert exc_info.value.status_code == 429
        assert sleeps.calls == [30.0, 30.0]

    @pytest.mark.parametrize("status", [400, 401, 403, 404, 422])
    def test_client_errors_fail_immediately(self, make_airtable_client, sleeps, status):
        """Test that other 4xx responses are not retried."""
        client, seen = make_airtable_client(responses((status, {"error": "nope"})))

        with pytest.raises(AirtableClientError) as exc_info:
            client.list_records("ClinicalPrograms")

        assert exc_info.value.status_code == status
        assert sleeps.calls == []
        assert len(seen) == 1

    def test_zero_retries_override(self, make_airtable_client, sleeps):
        """Test the per-call retries override."""
        client, seen = make_airtable_client(responses((503, {})), max_retries=0)

        with pytest.raises(AirtableClientError):
            client.list_records("ClinicalPrograms")

        assert sleeps.calls == []

    def test_network_error_has_no_status(self, make_airtable_client):
        """Test network failures."""
        def handler(request):
            raise httpx.ConnectError("connection refused")

        client, _ = make_airtable_client(handler)

        with pytest.raises(AirtableClientError) as exc_info:
            client.list_records("ClinicalPrograms")

        assert exc_info.value.status_code is None
        assert exc_info.value.code == "AIRTABLE_NETWORK_ERROR"

    def test_missing_token_raises_not_configured(self, make_airtable_client):
        """Test that no request is made without a PAT."""
        client, seen = make_airtable_client(responses(OK_PAGE))
        client.api_key = ""

        with pytest.raises(AirtableNotConfigured):
            client.list_records("ClinicalPrograms")

        assert seen == []

    def test_bearer_header_sent(self, make_airtable_client):
        """Test the Authorization header."""
        client, seen = make_airtable_client(responses(OK_PAGE))

        client.list_records("ClinicalPrograms")

        assert seen[0].headers["Authorization"] == "Bearer pat-test-token-1234"


# =============================================================================
# Rate limiter
# =============================================================================

class FakeClock:
    def __init__(self, start: float = 100.0):
        self.now = start
        self.slept: list[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.slept.append(seconds)
        self.now += seconds


class TestRateLimiter:
    """Test minimum spacing between requests."""

    def test_first_call_does_not_wait(self):
        """Test that the first request goes out immediately."""
        clock = FakeClock()
        limiter = RateLimiter(0.22, clock=clock, sleep=clock.sleep)

        assert limiter.acquire() == 0.0
        assert clock.slept == []

    def test_back_to_back_calls_are_spaced(self):
        """Test spacing between consecutive requests."""
        clock = FakeClock()
        limiter = RateLimiter(0.22, clock=clock, sleep=clock.sleep)

        limiter.acquire()
        limiter.acquire()
        limiter.acquire()

        assert clock.slept == pytest.approx([0.22, 0.22])

    def test_no_wait_after_gap(self):
        """Test no wait once the interval has passed."""
        clock = FakeClock()
        limiter = RateLimiter(0.22, clock=clock, sleep=clock.sleep)

        limiter.acquire()
        clock.now += 1.0
        limiter.acquire()

        assert clock.slept == []

    def test_partial_gap_waits_for_remainder(self):
        """Test waiting only for the rest of the interval."""
        clock = FakeClock()
        limiter = RateLimiter(0.22, clock=clock, sleep=clock.sleep)

        limiter.acquire()
        clock.now += 0.1
        limiter.acquire()

        assert clock.slept == pytest.approx([0.12])

    def test_default_spacing_from_settings(self):
        """Test the default interval comes from settings."""
        assert settings.AIRTABLE_MIN_SPACING_MS == 220


# =============================================================================
# Record operations
# =============================================================================

class TestRecordOperations:
    """Test listing, paging and updates."""

    def test_list_all_follows_offset(self, make_airtable_client):
        """Test pagination via offset."""
        def handler(request):
            if request.url.params.get("offset") == "page2":
                return httpx.Response(200, json={"records": [{"id": "rec3", "fields": {}}]})
            return httpx.Response(
                200,
                json={"records": [{"id": "rec1", "fields": {}}, {"id": "rec2", "fields": {}}], "offset": "page2"},
            )

        client, seen = make_airtable_client(handler)

        records = client.list_all_records("TrainingModules")

        assert [r["id"] for r in records] == ["rec1", "rec2", "rec3"]
        assert len(seen) == 2
        assert "offset" not in seen[0].url.params

    @pytest.mark.parametrize("requested,sent", [(500, "100"), (200, "100"), (50, "50"), (-5, "1")])
    def test_page_size_is_clamped(self, make_airtable_client, requested, sent):
        """Test page size clamping to 1..100."""
        client, seen = make_airtable_client(responses((200, {"records": []})))

        client.list_all_records("DocumentationForms", page_size=requested)

        assert seen[0].url.params["pageSize"] == sent

    def test_max_records_caps_total(self, make_airtable_client):
        """Test that max_records caps the result."""
        page = {"records": [{"id": f"rec{i}", "fields": {}} for i in range(3)], "offset": "more"}
        client, seen = make_airtable_client(responses((200, page), (200, page)))

        records = client.list_all_records("PatientHandouts", max_records=2)

        assert len(records) == 2
        assert len(seen) == 1

    def test_list_params_encoding(self, make_airtable_client):
        """Test query parameter encoding."""
        client, seen = make_airtable_client(responses((200, {"records": []})))

        client.list_records(
            "TrainingModules",
            fields=["moduleName", "sortOrder"],
            sort=[{"field": "sortOrder", "direction": "asc"}],
            filter_by_formula="'timemymeds' IN {programSlug}",
            max_records=5,
        )

        params = seen[0].url.params
        assert params.get_list("fields[]") == ["moduleName", "sortOrder"]
        assert params["sort[0][field]"] == "sortOrder"
        assert params["sort[0][direction]"] == "asc"
        assert params["filterByFormula"] == "'timemymeds' IN {programSlug}"
        assert params["maxRecords"] == "5"

    def test_table_name_is_url_encoded(self, make_airtable_client):
        """Test table names with spaces."""
        client, _ = make_airtable_client(responses(OK_PAGE))

        assert client.table_url("Patient Handouts").endswith("/appTestBase/Patient%20Handouts")

    def test_records_default_to_empty_list(self, make_airtable_client):
        """Test a page without a records key."""
        client, _ = make_airtable_client(responses((200, {})))

        assert client.list_records("ClinicalPrograms")["records"] == []

    def test_list_by_ids_empty_makes_no_request(self, make_airtable_client):
        """Test that an empty ID list skips the request."""
        client, seen = make_airtable_client(responses(OK_PAGE))

        assert client.list_records_by_ids("TrainingModules", []) == []
        assert seen == []

    def test_list_by_ids_builds_or_formula(self, make_airtable_client):
        """Test the RECORD_ID() formula and quote escaping."""
        client, seen = make_airtable_client(responses(OK_PAGE))

        client.list_records_by_ids("TrainingModules", ["rec1", "rec'2"])

        formula = seen[0].url.params["filterByFormula"]
        assert formula == "OR(RECORD_ID()='rec1',RECORD_ID()='rec''2')"

    def test_update_record_patches_fields(self, make_airtable_client):
        """Test PATCH of record fields."""
        client, seen = make_airtable_client(responses((200, {"id": "rec1", "fields": {}})))

        client.update_record("PatientHandouts", "rec1", {"supabaseFilePath": "resource-library/x/a.pdf"})

        assert seen[0].method == "PATCH"
        assert seen[0].url.path.endswith("/PatientHandouts/rec1")
        assert json.loads(seen[0].content) == {"fields": {"supabaseFilePath": "resource-library/x/a.pdf"}}

    def test_get_record_by_field_id(self, make_airtable_client):
        """Test single-record reads keyed by field ID."""
        client, seen = make_airtable_client(responses((200, {"id": "rec1", "fields": {"fldX": "a"}})))

        record = client.get_record("tblXsjw9EvEX1JnCy", "rec1", return_fields_by_field_id=True)

        assert record["fields"] == {"fldX": "a"}
        assert seen[0].url.path.endswith("/tblXsjw9EvEX1JnCy/rec1")
        assert seen[0].url.params["returnFieldsByFieldId"] == "true"

    def test_non_json_success_body_raises_client_error(self, make_airtable_client):
        """Test that a 2xx response that is not JSON becomes an AirtableClientError."""
        client, _ = make_airtable_client(lambda request: httpx.Response(200, text="<html>proxy page</html>"))

        with pytest.raises(AirtableClientError) as exc_info:
            client.list_records("ClinicalPrograms")

        assert exc_info.value.code == "AIRTABLE_INVALID_RESPONSE"
        assert exc_info.value.status_code == 200

    def test_curl_command_for_one_record(self, make_airtable_client):
        """Test the curl command for a single-record read."""
        client, _ = make_airtable_client(responses(OK_PAGE))

        curl = client.curl_command("ClinicalPrograms", record_id="rec1")

        assert '/ClinicalPrograms/rec1"' in curl

    def test_curl_command_redacts_token(self, make_airtable_client):
        """Test that the curl command never includes the PAT."""
        client, _ = make_airtable_client(responses(OK_PAGE))

        curl = client.curl_command("ClinicalPrograms", page_size=10)

        assert "pageSize=10" in curl
        assert "YOUR_TOKEN" in curl
        assert "pat-test-token-1234" not in curl

    def test_escape_formula_string(self):
        """Test single-quote escaping."""
        assert escape_formula_string("o'brien") == "o''brien"


# =============================================================================
# Credentials & connectivity
# =============================================================================

class TestCredentials:
    """Test the development credential override."""

    def test_settings_used_without_override(self):
        """Test credentials from settings."""
        creds = get_credentials()

        assert creds.api_key == settings.AIRTABLE_API_KEY
        assert creds.base_id == settings.AIRTABLE_BASE_ID

    def test_override_wins_over_settings(self):
        """Test that the override takes precedence."""
        set_credential_override(" patOverride ", "appOverride")

        creds = get_credentials()

        assert creds.api_key == "patOverride"
        assert creds.base_id == "appOverride"

    def test_partial_override_falls_back_per_value(self):
        """Test each value falling back independently."""
        set_credential_override("patOverride", "")

        creds = get_credentials()

        assert creds.api_key == "patOverride"
        assert creds.base_id == settings.AIRTABLE_BASE_ID

    def test_clear_override(self):
        """Test clearing the override."""
        set_credential_override("patOverride", "appOverride")
        clear_credential_override()

        assert get_credentials().api_key == settings.AIRTABLE_API_KEY

    def test_get_client_requires_both_values(self, monkeypatch):
        """Test get_airtable_client without a base ID."""
        monkeypatch.setattr(settings, "AIRTABLE_BASE_ID", "")

        with pytest.raises(AirtableNotConfigured):
            get_airtable_client()


class TestConnectivity:
    """Test test_connectivity() problem classification."""

    @pytest.mark.parametrize(
        "status,problem",
        [(401, "unauthorized"), (403, "unauthorized"), (404, "not_found"), (500, "http_error")],
    )
    def test_http_failures(self, make_airtable_client, sleeps, status, problem):
        """Test problem codes for failed connectivity checks."""
        client, seen = make_airtable_client(responses((status, {"error": "x"})))

        result = client.test_connectivity()

        assert result.ok is False
        assert result.problem == problem
        assert result.status == status
        # Diagnostics never retry
        assert len(seen) == 1
        assert sleeps.calls == []

    def test_success_hits_metadata_api(self, make_airtable_client):
        """Test a successful check against the Metadata API."""
        client, seen = make_airtable_client(responses((200, {"tables": []})))

        result = client.test_connectivity()

        assert result.ok is True
        assert seen[0].url.path.endswith("/meta/bases/appTestBase/tables")

    def test_no_token(self, make_airtable_client):
        """Test the check without a PAT."""
        client, seen = make_airtable_client(responses(OK_PAGE))
        client.api_key = ""

        result = client.test_connectivity()

        assert result.problem == "no_token"
        assert seen == []

    def test_network_failure(self, make_airtable_client):
        """Test the check when the network fails."""
        def handler(request):
            raise httpx.ConnectError("dns failure")

        client, _ = make_airtable_client(handler)

        assert client.test_connectivity().problem == "network"
