#!/usr/bin/env python3
# =============================================================================
# scripts/migrate_files_to_supabase.py - Move Airtable Attachments to Storage
# =============================================================================
# One-off migration: copies the first attachment of every record in the
# file-bearing Airtable tables into Supabase Storage, then writes the
# object path into each record's `supabaseFilePath` field.
#
# Usage:
#   python scripts/migrate_files_to_supabase.py
#   python scripts/migrate_files_to_supabase.py --dry-run
#   python scripts/migrate_files_to_supabase.py --table PatientHandouts --table ClinicalGuidelines
#
# Prerequisites (environment or .env):
#   AIRTABLE_PAT (or AIRTABLE_API_KEY), AIRTABLE_BASE_ID,
#   SUPABASE_URL, SUPABASE_SERVICE_KEY
# =============================================================================

import argparse
import logging
import os
import sys

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dotenv import load_dotenv
load_dotenv()

REQUIRED_ENV = ("AIRTABLE_BASE_ID", "SUPABASE_URL", "SUPABASE_SERVICE_KEY")


def missing_env() -> list[str]:
    """Names of required variables that are unset or blank."""
    missing = []
    if not (os.getenv("AIRTABLE_PAT") or os.getenv("AIRTABLE_API_KEY")):
        missing.append("AIRTABLE_PAT")
    missing.extend(name for name in REQUIRED_ENV if not os.getenv(name))
    return missing


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Migrate Airtable attachments to Supabase Storage")
    parser.add_argument(
        "--table",
        action="append",
        dest="tables",
        metavar="NAME",
        help="Only migrate this Airtable table (repeatable)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Compute storage paths without downloading, uploading or updating records",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )
    logger = logging.getLogger("migrate_files_to_supabase")

    missing = missing_env()
    if missing:
        logger.error(f"Missing required environment variables: {', '.join(missing)}")
        return 1

    # Imported after the env check: settings are read at import time
    from core.services.migration_service import MIGRATION_TABLES, AttachmentMigrator, get_migration_table
    from core.services.storage_service import StorageService
    from lib.airtable_client import AirtableClient
    from lib.supabase_client import SupabaseClient

    if args.tables:
        try:
            specs = [get_migration_table(name) for name in args.tables]
        except KeyError as e:
            known = ", ".join(spec.table for spec in MIGRATION_TABLES)
            logger.error(f"Unknown table {e}. Known tables: {known}")
            return 1
    else:
        specs = list(MIGRATION_TABLES)

    api_key = os.getenv("AIRTABLE_PAT") or os.getenv("AIRTABLE_API_KEY")
    storage = None if args.dry_run else StorageService(SupabaseClient.get_service_client())

    logger.info("Starting file migration from Airtable to Supabase" + (" (dry run)" if args.dry_run else ""))

    with AirtableClient(api_key=api_key, base_id=os.environ["AIRTABLE_BASE_ID"]) as airtable:
        migrator = AttachmentMigrator(airtable, storage, dry_run=args.dry_run)
        report = migrator.migrate_all(specs)

    for table in report.tables:
        logger.info(f"  {table.table}: {table.migrated} migrated, {table.failed} failed, {table.skipped} skipped")
    logger.info(
        f"Migration complete: {report.migrated} migrated, {report.failed} failed, {report.skipped} skipped"
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
