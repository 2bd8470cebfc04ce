# =============================================================================
# core/services/resource_library_service.py - Resource Library (Airtable)
# =============================================================================
# Business logic behind GET /api/resource-library.
#
# Three Airtable tables are read (optionally narrowed by category), tagged
# with their category, concatenated in a fixed order and text-filtered.
# =============================================================================

import logging
from dataclasses import dataclass

from app.exceptions import AirtableNotConfiguredError, UpstreamServiceError
from core.models.library import ResourceCategory, ResourceLibraryItem, ResourceLibraryResponse
from lib import airtable_schema as tables
from lib.airtable_client import (
    AirtableClient,
    AirtableClientError,
    AirtableNotConfigured,
    get_airtable_client,
)
from lib.cell_values import first_attachment_url, string_field

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LibraryTable:
    """Where one category lives in Airtable."""

    category: ResourceCategory
    table: str
    name_field: str
    file_field: str
    link_field: str | None = None

    @property
    def fields(self) -> list[str]:
        return [f for f in (self.name_field, self.file_field, self.link_field) if f]


# Order here is the order of the response
LIBRARY_TABLES: tuple[LibraryTable, ...] = (
    LibraryTable(ResourceCategory.HANDOUTS, tables.PATIENT_HANDOUTS, "handoutName", "handoutFile"),
    LibraryTable(
        ResourceCategory.CLINICAL,
        tables.CLINICAL_GUIDELINES,
        "guidelineName",
        "guidelineFile",
        "guidelineLink",
    ),
    LibraryTable(
        ResourceCategory.BILLING,
        tables.MEDICAL_BILLING_RESOURCES,
        "billingresourceName",
        "billingresourceFile",
    ),
)


def matches_query(item: ResourceLibraryItem, query: str) -> bool:
    """Case-insensitive substring match on "<name> <category>"."""
    if not query:
        return True
    return query.lower() in f"{item.name} {item.category.value}".lower()


class ResourceLibraryService:
    """Service for the Airtable-backed unified Resource Library."""

    def __init__(self, client: AirtableClient | None = None):
        self._client = client

    def _get_client(self) -> AirtableClient:
        if self._client is not None:
            return self._client
        try:
            self._client = get_airtable_client()
        except AirtableNotConfigured:
            raise AirtableNotConfiguredError()
        return self._client

    def close(self) -> None:
        if self._client is not None:
            self._client.close()

    def fetch_table(self, spec: LibraryTable) -> list[ResourceLibraryItem]:
        """
        Fetch one table as library items.

        The link field (when the table has one) wins over the attachment URL.
        """
        client = self._get_client()
        records = client.list_all_records(spec.table, fields=spec.fields, page_size=100)

        items = []
        for record in records:
            fields = record.get("fields", {})
            link = string_field(fields, spec.link_field) if spec.link_field else None
            items.append(
                ResourceLibraryItem(
                    id=record["id"],
                    name=string_field(fields, spec.name_field) or "",
                    url=link or first_attachment_url(fields.get(spec.file_field)),
                    category=spec.category,
                )
            )
        return items

    def search(self, category: str | None = None, query: str | None = None) -> ResourceLibraryResponse:
        """
        Aggregate and filter the library.

        Args:
            category: handouts | clinical | billing (case-insensitive). Any
                other non-empty value selects no table.
            query: Free text matched against name + category

        Raises:
            AirtableNotConfiguredError: If credentials are missing
            UpstreamServiceError: If Airtable fails
        """
        filter_cat = (category or "").strip().lower()
        query_lc = (query or "").strip().lower()

        selected = [spec for spec in LIBRARY_TABLES if not filter_cat or spec.category.value == filter_cat]
        if selected:
            # Fail fast on missing credentials even before the first fetch
            self._get_client()

        results: list[ResourceLibraryItem] = []
        try:
            for spec in selected:
                results.extend(self.fetch_table(spec))
        except AirtableClientError as e:
            logger.error(f"Failed to load resource library: {e}")
            raise UpstreamServiceError("airtable")

        filtered = [item for item in results if matches_query(item, query_lc)]
        logger.debug(f"Resource library: {len(filtered)}/{len(results)} items (cat={filter_cat!r}, q={query_lc!r})")
        return ResourceLibraryResponse(items=filtered)
