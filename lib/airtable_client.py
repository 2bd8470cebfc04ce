# =============================================================================
# lib/airtable_client.py - Airtable REST Client
# =============================================================================
# Thin httpx wrapper around the Airtable REST API (Bearer PAT auth).
#
# Airtable allows 5 requests/second per base. This client enforces that with
# a shared rate limiter and retries the two failure modes Airtable documents:
# - 429: wait a fixed 30 seconds, then retry
# - 5xx: exponential backoff starting at 500ms
# Both retry paths share one attempt budget (AIRTABLE_MAX_RETRIES, default 2).
#
# Usage:
#   from lib.airtable_client import get_airtable_client
#   client = get_airtable_client()
#   records = client.list_all_records("ClinicalPrograms", page_size=50)
# =============================================================================

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Iterable
from urllib.parse import quote, urlencode

import httpx

from app.config import settings
from lib.utils import ApplicationError, mask_secret

logger = logging.getLogger(__name__)

# Airtable caps pageSize at 100
MAX_PAGE_SIZE = 100


# =============================================================================
# Errors
# =============================================================================

class AirtableClientError(ApplicationError):
    """
    Error returned by (or while talking to) the Airtable API.

    status_code is None for network-level failures.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        body: str = "",
        code: str = "AIRTABLE_ERROR",
        suggestion: str | None = None,
    ):
        super().__init__(
            message,
            code=code,
            suggestion=suggestion,
            details={"status_code": status_code, "body": body[:500]},
        )
        self.status_code = status_code
        self.body = body


class AirtableNotConfigured(ApplicationError):
    """Raised when no PAT / base ID is available."""

    def __init__(self):
        super().__init__(
            "Airtable is not configured. Set AIRTABLE_API_KEY and AIRTABLE_BASE_ID.",
            code="AIRTABLE_NOT_CONFIGURED",
            suggestion="Add AIRTABLE_API_KEY (or AIRTABLE_PAT) and AIRTABLE_BASE_ID to your .env file",
        )


# =============================================================================
# Credentials
# =============================================================================

@dataclass(frozen=True)
class AirtableCredentials:
    """PAT + base ID pair."""

    api_key: str
    base_id: str

    @property
    def complete(self) -> bool:
        return bool(self.api_key and self.base_id)


# Development-only override set through the dev setup endpoints.
# Looked up before settings, the same way the browser build looked in
# localStorage before env vars.
_credential_override: AirtableCredentials | None = None
_override_lock = threading.Lock()


def set_credential_override(api_key: str, base_id: str) -> AirtableCredentials:
    """Store an in-process PAT/base override (development only)."""
    global _credential_override
    creds = AirtableCredentials(api_key=api_key.strip(), base_id=base_id.strip())
    with _override_lock:
        _credential_override = creds
    logger.info(f"Airtable credential override set (base {creds.base_id}, PAT {mask_secret(creds.api_key)})")
    return creds


def clear_credential_override() -> None:
    """Drop the in-process override."""
    global _credential_override
    with _override_lock:
        _credential_override = None


def get_credentials() -> AirtableCredentials:
    """
    Effective Airtable credentials.

    Each value comes from the override when set, otherwise from settings.
    """
    override = _credential_override
    api_key = (override.api_key if override and override.api_key else "") or settings.AIRTABLE_API_KEY
    base_id = (override.base_id if override and override.base_id else "") or settings.AIRTABLE_BASE_ID
    return AirtableCredentials(api_key=api_key, base_id=base_id)


# =============================================================================
# Rate Limiter
# =============================================================================

class RateLimiter:
    """
    Serializes requests with a minimum gap between them.

    Keeps a single "next available timestamp". acquire() sleeps until that
    moment, then pushes it forward by min_spacing. The lock is held while
    sleeping so concurrent callers queue up behind each other.
    """

    def __init__(
        self,
        min_spacing: float,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.min_spacing = min_spacing
        self._clock = clock
        self._sleep = sleep
        self._next_available = 0.0
        self._lock = threading.Lock()

    def acquire(self) -> float:
        """Block until a slot is free. Returns the seconds waited."""
        with self._lock:
            wait = max(0.0, self._next_available - self._clock())
            if wait > 0:
                self._sleep(wait)
            self._next_available = self._clock() + self.min_spacing
            return wait

    def reset(self) -> None:
        with self._lock:
            self._next_available = 0.0


# One limiter for the whole process: the limit is per base, not per client
_shared_rate_limiter = RateLimiter(settings.AIRTABLE_MIN_SPACING_MS / 1000)


def get_shared_rate_limiter() -> RateLimiter:
    return _shared_rate_limiter


# =============================================================================
# Connectivity check result
# =============================================================================

@dataclass
class ConnectivityResult:
    """Outcome of AirtableClient.test_connectivity()."""

    ok: bool
    problem: str | None = None  # no_token | unauthorized | not_found | http_error | network
    status: int | None = None
    message: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"ok": self.ok, "problem": self.problem, "status": self.status, "message": self.message}


# =============================================================================
# Client
# =============================================================================

class AirtableClient:
    """
    Airtable REST client for one base.

    Example:
        client = AirtableClient(api_key="pat...", base_id="app...")
        page = client.list_records("ClinicalPrograms", page_size=10)
        for record in page["records"]:
            print(record["id"], record["fields"].get("programName"))
    """

    def __init__(
        self,
        api_key: str,
        base_id: str,
        api_url: str | None = None,
        http_client: httpx.Client | None = None,
        rate_limiter: RateLimiter | None = None,
        sleep: Callable[[float], None] = time.sleep,
        max_retries: int | None = None,
        rate_limit_wait: float | None = None,
        backoff_base: float | None = None,
    ):
        self.api_key = api_key
        self.base_id = base_id
        self.api_url = (api_url or settings.AIRTABLE_API_URL).rstrip("/")
        self._http = http_client or httpx.Client(timeout=30.0)
        self._owns_http = http_client is None
        self._rate_limiter = rate_limiter or get_shared_rate_limiter()
        self._sleep = sleep
        self.max_retries = settings.AIRTABLE_MAX_RETRIES if max_retries is None else max_retries
        self.rate_limit_wait = (
            settings.AIRTABLE_RATE_LIMIT_WAIT_SECONDS if rate_limit_wait is None else rate_limit_wait
        )
        self.backoff_base = settings.AIRTABLE_BACKOFF_BASE_MS / 1000 if backoff_base is None else backoff_base

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def close(self) -> None:
        if self._owns_http:
            self._http.close()

    def __enter__(self) -> "AirtableClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # -------------------------------------------------------------------------
    # URL helpers
    # -------------------------------------------------------------------------

    def table_url(self, table: str, record_id: str | None = None) -> str:
        url = f"{self.api_url}/{self.base_id}/{quote(table, safe='')}"
        if record_id:
            url += f"/{quote(record_id, safe='')}"
        return url

    def curl_command(self, table: str, record_id: str | None = None, **list_kwargs: Any) -> str:
        """Equivalent curl command for a list or single-record request (token redacted)."""
        url = self.table_url(table, record_id)
        params = self._list_params(**list_kwargs)
        if params:
            url += "?" + urlencode(params)
        return f'curl "{url}" \\\n  -H "Authorization: Bearer YOUR_TOKEN"'

    # -------------------------------------------------------------------------
    # Core request loop
    # -------------------------------------------------------------------------

    def send(
        self,
        method: str,
        url: str,
        params: list[tuple[str, str]] | None = None,
        json: dict[str, Any] | None = None,
        retries: int | None = None,
    ) -> dict[str, Any]:
        """
        Authorized, rate-limited request returning parsed JSON.

        Retries 429 (fixed wait) and 5xx (exponential backoff) until the
        retry budget is spent; any other non-2xx fails immediately.

        Raises:
            AirtableNotConfigured: If no PAT is set
            AirtableClientError: On a non-retryable or exhausted failure
        """
        if not self.api_key:
            raise AirtableNotConfigured()

        budget = self.max_retries if retries is None else retries
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

        attempt = 0
        while True:
            self._rate_limiter.acquire()

            try:
                response = self._http.request(method, url, params=params, json=json, headers=headers)
            except httpx.HTTPError as e:
                raise AirtableClientError(
                    message=f"Airtable request failed: {e}",
                    code="AIRTABLE_NETWORK_ERROR",
                    suggestion="Check network connectivity to api.airtable.com",
                )

            if response.is_success:
                try:
                    return response.json()
                except ValueError:
                    logger.error(f"Airtable returned non-JSON {response.status_code} for {method} {url}")
                    raise AirtableClientError(
                        message="Airtable returned a response that is not JSON",
                        status_code=response.status_code,
                        body=response.text,
                        code="AIRTABLE_INVALID_RESPONSE",
                    )

            status = response.status_code
            body = response.text

            if status == 429 and attempt < budget:
                attempt += 1
                logger.warning(
                    f"Airtable rate limited (429); waiting {self.rate_limit_wait}s "
                    f"before retry {attempt}/{budget}"
                )
                self._sleep(self.rate_limit_wait)
                continue

            if 500 <= status < 600 and attempt < budget:
                delay = self.backoff_base * (2 ** attempt)
                attempt += 1
                logger.warning(
                    f"Airtable server error {status}; backing off {delay:.2f}s "
                    f"before retry {attempt}/{budget}"
                )
                self._sleep(delay)
                continue

            logger.error(f"Airtable error {status} for {method} {url}: {body[:200]}")
            raise AirtableClientError(
                message=f"Airtable error {status}: {body or response.reason_phrase}",
                status_code=status,
                body=body,
            )

    # -------------------------------------------------------------------------
    # Record operations
    # -------------------------------------------------------------------------

    @staticmethod
    def _list_params(
        page_size: int | None = None,
        offset: str | None = None,
        filter_by_formula: str | None = None,
        fields: Iterable[str] | None = None,
        view: str | None = None,
        sort: list[dict[str, str]] | None = None,
        max_records: int | None = None,
        return_fields_by_field_id: bool = False,
    ) -> list[tuple[str, str]]:
        params: list[tuple[str, str]] = []
        if return_fields_by_field_id:
            params.append(("returnFieldsByFieldId", "true"))
        if page_size:
            params.append(("pageSize", str(page_size)))
        if max_records:
            params.append(("maxRecords", str(max_records)))
        if offset:
            params.append(("offset", offset))
        if filter_by_formula:
            params.append(("filterByFormula", filter_by_formula))
        if view:
            params.append(("view", view))
        for i, spec in enumerate(sort or []):
            params.append((f"sort[{i}][field]", spec["field"]))
            if spec.get("direction"):
                params.append((f"sort[{i}][direction]", spec["direction"]))
        for field in fields or []:
            if field:
                params.append(("fields[]", field))
        return params

    def list_records(
        self,
        table: str,
        page_size: int | None = None,
        offset: str | None = None,
        filter_by_formula: str | None = None,
        fields: Iterable[str] | None = None,
        view: str | None = None,
        sort: list[dict[str, str]] | None = None,
        max_records: int | None = None,
        return_fields_by_field_id: bool = False,
    ) -> dict[str, Any]:
        """
        List one page of records.

        Returns:
            {"records": [...], "offset": "..."} - offset only when more pages exist
        """
        params = self._list_params(
            page_size=page_size,
            offset=offset,
            filter_by_formula=filter_by_formula,
            fields=fields,
            view=view,
            sort=sort,
            max_records=max_records,
            return_fields_by_field_id=return_fields_by_field_id,
        )
        data = self.send("GET", self.table_url(table), params=params)
        data.setdefault("records", [])
        return data

    def first_page(self, table: str, **kwargs: Any) -> list[dict[str, Any]]:
        """Records from the first page only."""
        return self.list_records(table, **kwargs)["records"]

    def list_all_records(
        self,
        table: str,
        page_size: int = MAX_PAGE_SIZE,
        max_records: int | None = None,
        **kwargs: Any,
    ) -> list[dict[str, Any]]:
        """
        List all records across pages, following `offset`.

        page_size is clamped to 1..100; max_records caps the total returned.
        """
        page_size = min(max(page_size or MAX_PAGE_SIZE, 1), MAX_PAGE_SIZE)
        records: list[dict[str, Any]] = []
        offset: str | None = None

        while True:
            page = self.list_records(table, page_size=page_size, offset=offset, **kwargs)
            records.extend(page["records"])
            if max_records and len(records) >= max_records:
                return records[:max_records]
            offset = page.get("offset")
            if not offset:
                break

        logger.debug(f"Fetched {len(records)} records from {table}")
        return records

    def get_record(
        self,
        table: str,
        record_id: str,
        fields: Iterable[str] | None = None,
        return_fields_by_field_id: bool = False,
    ) -> dict[str, Any]:
        """Get a single record by ID."""
        params = self._list_params(fields=fields, return_fields_by_field_id=return_fields_by_field_id)
        return self.send("GET", self.table_url(table, record_id), params=params)

    def list_records_by_ids(
        self,
        table: str,
        record_ids: list[str],
        fields: Iterable[str] | None = None,
    ) -> list[dict[str, Any]]:
        """List records matching a set of IDs via OR(RECORD_ID()='...')."""
        if not record_ids:
            return []
        formula = "OR(" + ",".join(f"RECORD_ID()='{escape_formula_string(rid)}'" for rid in record_ids) + ")"
        return self.list_records(
            table,
            filter_by_formula=formula,
            fields=fields,
            page_size=MAX_PAGE_SIZE,
        )["records"]

    def update_record(self, table: str, record_id: str, fields: dict[str, Any]) -> dict[str, Any]:
        """PATCH a record by ID using field names in the payload."""
        return self.send("PATCH", self.table_url(table, record_id), json={"fields": fields})

    # -------------------------------------------------------------------------
    # Diagnostics
    # -------------------------------------------------------------------------

    def test_connectivity(self) -> ConnectivityResult:
        """
        Verify the PAT and base ID via the Metadata API.

        Never raises; the problem is reported on the result instead.
        """
        if not self.api_key:
            return ConnectivityResult(ok=False, problem="no_token", message="Airtable PAT missing.")

        url = f"{self.api_url}/meta/bases/{self.base_id}/tables"
        try:
            self.send("GET", url, retries=0)
        except AirtableClientError as e:
            if e.status_code is None:
                return ConnectivityResult(ok=False, problem="network", message=e.message)
            if e.status_code in (401, 403):
                problem = "unauthorized"
            elif e.status_code == 404:
                problem = "not_found"
            else:
                problem = "http_error"
            return ConnectivityResult(ok=False, problem=problem, status=e.status_code, message=e.message)

        return ConnectivityResult(ok=True, status=200, message=f"Connected to Airtable (base {self.base_id}).")


# =============================================================================
# Helpers
# =============================================================================

def escape_formula_string(value: str) -> str:
    """Escape a value for a single-quoted filterByFormula literal."""
    return value.replace("'", "''")


def get_airtable_client(**kwargs: Any) -> AirtableClient:
    """
    Build a client from the effective credentials.

    Raises:
        AirtableNotConfigured: If the PAT or base ID is missing
    """
    creds = get_credentials()
    if not creds.complete:
        raise AirtableNotConfigured()
    return AirtableClient(api_key=creds.api_key, base_id=creds.base_id, **kwargs)
