# =============================================================================
# core/services/migration_service.py - Airtable -> Supabase File Migration
# =============================================================================
# Copies the first attachment of every record in the file-bearing Airtable
# tables into Supabase Storage and writes the object path back into the
# record's `supabaseFilePath` field.
#
# Object paths: <prefix>/<programSlug or "uncategorized">/<filename>
#
# A failed record is logged and counted; the table keeps going.
# =============================================================================

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable

import httpx

from app.exceptions import StorageUploadError
from core.services.storage_service import DEFAULT_CONTENT_TYPE, StorageService
from lib import airtable_schema as tables
from lib.airtable_client import AirtableClient, AirtableClientError
from lib.cell_values import get_attachment_array, get_select_text

logger = logging.getLogger(__name__)

Downloader = Callable[[str], bytes]

UNCATEGORIZED = "uncategorized"
PATH_FIELD = "supabaseFilePath"


@dataclass(frozen=True)
class MigrationTable:
    """One Airtable table whose attachments move to Storage."""

    table: str
    file_field: str
    bucket: str
    path_prefix: str


MIGRATION_TABLES: tuple[MigrationTable, ...] = (
    MigrationTable(tables.TRAINING_MODULES, "moduleFile", "clinical-programs", "clinical-programs"),
    MigrationTable(tables.PROTOCOL_MANUALS, "protocolFile", "clinical-programs", "clinical-programs"),
    MigrationTable(tables.DOCUMENTATION_FORMS, "formFile", "clinical-programs", "clinical-programs"),
    MigrationTable(tables.ADDITIONAL_RESOURCES, "resourceFile", "clinical-programs", "clinical-programs"),
    MigrationTable(tables.PATIENT_HANDOUTS, "handoutFile", "resource-library", "resource-library"),
    MigrationTable(tables.CLINICAL_GUIDELINES, "guidelineFile", "resource-library", "resource-library"),
    MigrationTable(tables.MEDICAL_BILLING_RESOURCES, "billingresourceFile", "resource-library", "resource-library"),
)


def get_migration_table(name: str) -> MigrationTable:
    """
    Look up a migration entry by Airtable table name (case-insensitive).

    Raises:
        KeyError: If the table has no file field to migrate
    """
    for spec in MIGRATION_TABLES:
        if spec.table.lower() == name.lower():
            return spec
    raise KeyError(name)


@dataclass
class TableReport:
    table: str
    migrated: int = 0
    failed: int = 0
    skipped: int = 0
    paths: list[str] = field(default_factory=list)


@dataclass
class MigrationReport:
    tables: list[TableReport] = field(default_factory=list)
    dry_run: bool = False

    @property
    def migrated(self) -> int:
        return sum(t.migrated for t in self.tables)

    @property
    def failed(self) -> int:
        return sum(t.failed for t in self.tables)

    @property
    def skipped(self) -> int:
        return sum(t.skipped for t in self.tables)


def download_file(url: str) -> bytes:
    """Fetch an attachment body from its (signed) Airtable URL."""
    response = httpx.get(url, follow_redirects=True)
    response.raise_for_status()
    return response.content


def storage_path(spec: MigrationTable, fields: dict[str, Any], filename: str) -> str:
    """<prefix>/<programSlug or uncategorized>/<filename>"""
    slug = get_select_text(fields.get("programSlug")) or UNCATEGORIZED
    return f"{spec.path_prefix}/{slug}/{filename}"


class AttachmentMigrator:
    """
    Moves Airtable attachments into Supabase Storage.

    Args:
        airtable: Client for reading records and writing back the path
        storage: StorageService bound to the service_role client (unused on a dry run)
        downloader: url -> bytes (defaults to an httpx GET)
        dry_run: Only compute paths; no download, upload or record update
    """

    def __init__(
        self,
        airtable: AirtableClient,
        storage: StorageService | None,
        downloader: Downloader = download_file,
        dry_run: bool = False,
    ):
        self.airtable = airtable
        self.storage = storage
        self.downloader = downloader
        self.dry_run = dry_run

    def migrate_record(self, spec: MigrationTable, record: dict[str, Any]) -> str | None:
        """
        Migrate one record's first attachment.

        Returns:
            The object path, or None when the record has no attachment
        """
        fields = record.get("fields", {})
        attachments = get_attachment_array(fields.get(spec.file_field))
        if not attachments:
            return None

        attachment = attachments[0]
        path = storage_path(spec, fields, attachment.filename)

        if self.dry_run:
            logger.info(f"[dry-run] {spec.table}/{record['id']} -> {spec.bucket}/{path}")
            return path

        logger.info(f"Downloading: {attachment.filename}")
        content = self.downloader(attachment.url)

        logger.info(f"Uploading to: {path}")
        self.storage.upload_bytes(spec.bucket, path, content, attachment.type or DEFAULT_CONTENT_TYPE)

        self.airtable.update_record(spec.table, record["id"], {PATH_FIELD: path})
        logger.info(f"Migrated: {attachment.filename}")
        return path

    def migrate_table(self, spec: MigrationTable) -> TableReport:
        """Migrate every record of one table."""
        logger.info(f"Migrating table: {spec.table}")
        report = TableReport(table=spec.table)

        for record in self.airtable.list_all_records(spec.table):
            try:
                path = self.migrate_record(spec, record)
            except (httpx.HTTPError, StorageUploadError, AirtableClientError) as e:
                report.failed += 1
                logger.error(f"Failed to migrate {spec.table}/{record.get('id')}: {e}")
                continue

            if path is None:
                report.skipped += 1
            else:
                report.migrated += 1
                report.paths.append(path)

        logger.info(
            f"Table {spec.table} complete: {report.migrated} migrated, "
            f"{report.failed} failed, {report.skipped} skipped"
        )
        return report

    def migrate_all(self, specs: Iterable[MigrationTable] = MIGRATION_TABLES) -> MigrationReport:
        """Run tables in order and collect their reports."""
        report = MigrationReport(dry_run=self.dry_run)
        for spec in specs:
            report.tables.append(self.migrate_table(spec))
        return report
