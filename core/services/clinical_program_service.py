# =============================================================================
# core/services/clinical_program_service.py - Clinical Programs (Airtable)
# =============================================================================
# Business logic behind GET /api/clinical-programs.
#
# - list mode: compact list of programs from ClinicalPrograms
# - detail mode: one program by programSlug plus its training modules,
#   protocol manuals, documentation forms and additional resources
#
# Child tables link to a program through their programSlug lookup field,
# matched with `'<slug>' IN {programSlug}` at query time.
# =============================================================================

import logging
import re
from typing import Any

from app.exceptions import (
    AirtableNotConfiguredError,
    ProgramNotFoundError,
    UpstreamServiceError,
)
from core.models.program import (
    AdditionalResourceItem,
    DocumentationFormItem,
    ProgramDetail,
    ProgramList,
    ProgramListItem,
    ProtocolManualItem,
    TrainingModuleItem,
)
from lib import airtable_schema as tables
from lib.airtable_client import (
    AirtableClient,
    AirtableClientError,
    AirtableNotConfigured,
    escape_formula_string,
    get_airtable_client,
)
from lib.cell_values import first_attachment_url, get_select_text, string_field

logger = logging.getLogger(__name__)

LIST_FIELDS = ["programName", "programDescription", "programSlug", "experienceLevel"]

# Blank line, CRLF pair or single newline
_PARAGRAPH_SPLIT = re.compile(r"\n\s*\n|\r\n\r\n|\n")


def split_paragraphs(text: str) -> list[str]:
    """Split an overview into trimmed, non-empty paragraphs."""
    if not text:
        return []
    return [part.strip() for part in _PARAGRAPH_SPLIT.split(text) if part.strip()]


def _text(fields: dict[str, Any], name: str) -> str:
    return string_field(fields, name) or ""


def _optional_text(fields: dict[str, Any], name: str) -> str | None:
    return string_field(fields, name) or None


class ClinicalProgramService:
    """
    Service for the Airtable-backed program endpoints.

    A client can be injected for tests; otherwise one is built per call
    from the effective credentials.
    """

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

    # -------------------------------------------------------------------------
    # List mode
    # -------------------------------------------------------------------------

    def list_programs(self) -> ProgramList:
        """
        Return the compact program list.

        Returns:
            ProgramList - items is [] when the table has no records

        Raises:
            AirtableNotConfiguredError: If credentials are missing
            UpstreamServiceError: If Airtable fails
        """
        client = self._get_client()

        try:
            records = client.list_all_records(tables.CLINICAL_PROGRAMS, fields=LIST_FIELDS, page_size=50)
        except AirtableClientError as e:
            logger.error(f"Failed to list clinical programs: {e}")
            raise UpstreamServiceError("airtable")

        items = []
        for record in records:
            fields = record.get("fields", {})
            items.append(
                ProgramListItem(
                    programSlug=_text(fields, "programSlug"),
                    programName=_text(fields, "programName"),
                    programDescription=_text(fields, "programDescription"),
                    experienceLevel=get_select_text(fields.get("experienceLevel")) or None,
                )
            )

        logger.info(f"Listed {len(items)} clinical programs")
        return ProgramList(items=items)

    # -------------------------------------------------------------------------
    # Detail mode
    # -------------------------------------------------------------------------

    def get_program_detail(self, program_slug: str) -> ProgramDetail:
        """
        Return full detail for one program.

        Args:
            program_slug: Airtable programSlug (already trimmed, non-empty)

        Raises:
            ProgramNotFoundError: If no program matches the slug
            AirtableNotConfiguredError: If credentials are missing
            UpstreamServiceError: If Airtable fails
        """
        client = self._get_client()
        esc = escape_formula_string(program_slug)
        child_formula = f"'{esc}' IN {{programSlug}}"

        try:
            matches = client.first_page(
                tables.CLINICAL_PROGRAMS,
                filter_by_formula=f"{{programSlug}} = '{esc}'",
                max_records=1,
            )
            if not matches:
                raise ProgramNotFoundError(program_slug)

            modules = client.list_all_records(
                tables.TRAINING_MODULES,
                filter_by_formula=child_formula,
                fields=["moduleName", "moduleLength", "moduleFile", "moduleLink", "sortOrder"],
                sort=[{"field": "sortOrder", "direction": "asc"}],
                page_size=100,
            )
            manuals = client.list_all_records(
                tables.PROTOCOL_MANUALS,
                filter_by_formula=child_formula,
                fields=["protocolName", "protocolFile", "fileLink"],
                page_size=100,
            )
            # pageSize is capped at 100 by the client; all pages are still read
            forms = client.list_all_records(
                tables.DOCUMENTATION_FORMS,
                filter_by_formula=child_formula,
                fields=["formName", "formFile", "formCategory", "formLink"],
                page_size=200,
            )
            resources = client.list_all_records(
                tables.ADDITIONAL_RESOURCES,
                filter_by_formula=child_formula,
                fields=["resourceName", "resourceFile", "resourceLink"],
                page_size=100,
            )
        except AirtableClientError as e:
            logger.error(f"Failed to load program {program_slug}: {e}")
            raise UpstreamServiceError("airtable")

        fields = matches[0].get("fields", {})
        overview = _text(fields, "programOverview")

        return ProgramDetail(
            programSlug=program_slug,
            programName=_text(fields, "programName"),
            programDescription=_text(fields, "programDescription"),
            programOverview=overview,
            programOverviewParagraphs=split_paragraphs(overview),
            experienceLevel=get_select_text(fields.get("experienceLevel")) or None,
            trainingModules=[self._module(r) for r in modules],
            protocolManuals=[self._manual(r) for r in manuals],
            documentationForms=[self._form(r) for r in forms],
            additionalResources=[self._resource(r) for r in resources],
        )

    # -------------------------------------------------------------------------
    # Record mappers
    # -------------------------------------------------------------------------

    @staticmethod
    def _module(record: dict[str, Any]) -> TrainingModuleItem:
        f = record.get("fields", {})
        return TrainingModuleItem(
            id=record["id"],
            moduleName=_text(f, "moduleName"),
            moduleLength=_optional_text(f, "moduleLength"),
            moduleLink=string_field(f, "moduleLink"),
            moduleFileUrl=first_attachment_url(f.get("moduleFile")),
        )

    @staticmethod
    def _manual(record: dict[str, Any]) -> ProtocolManualItem:
        f = record.get("fields", {})
        return ProtocolManualItem(
            id=record["id"],
            protocolName=_text(f, "protocolName"),
            protocolFileUrl=string_field(f, "fileLink") or first_attachment_url(f.get("protocolFile")),
        )

    @staticmethod
    def _form(record: dict[str, Any]) -> DocumentationFormItem:
        f = record.get("fields", {})
        return DocumentationFormItem(
            id=record["id"],
            formName=_text(f, "formName"),
            formCategory=get_select_text(f.get("formCategory")) or None,
            formLink=string_field(f, "formLink"),
            formFileUrl=first_attachment_url(f.get("formFile")),
        )

    @staticmethod
    def _resource(record: dict[str, Any]) -> AdditionalResourceItem:
        f = record.get("fields", {})
        return AdditionalResourceItem(
            id=record["id"],
            resourceName=_text(f, "resourceName"),
            resourceLink=string_field(f, "resourceLink"),
            resourceFileUrl=first_attachment_url(f.get("resourceFile")),
        )
