# =============================================================================
# lib/supabase_client.py - Supabase Client Wrapper
# =============================================================================
# Typed wrapper for the Supabase tables that mirror the Airtable content:
# - programs and their child tables (training_modules, protocol_manuals,
#   documentation_forms, additional_resources)
# - resource library tables (patient_handouts, clinical_guidelines,
#   medical_billing_resources)
#
# Two singletons are kept:
# - the anon client (read access through RLS) for the web app
# - the service client (bypasses RLS) for the migration script only
#
# Usage:
#   from lib.supabase_client import SupabaseClient
#   programs = SupabaseClient.fetch_rows("programs", order="name")
# =============================================================================

from __future__ import annotations

import logging
from typing import Any

from supabase import create_client, Client

from app.config import settings
from lib.utils import ApplicationError

# Set up logging for this module
logger = logging.getLogger(__name__)


class SupabaseClientError(ApplicationError):
    """
    Error during Supabase operations.

    Provides actionable error messages following the principle:
    "Errors should tell HOW to fix, not just WHAT failed."
    """

    def __init__(self, message: str, code: str = "SUPABASE_ERROR", **kwargs: Any):
        super().__init__(message, code=code, **kwargs)


class SupabaseNotConfigured(SupabaseClientError):
    """Raised when SUPABASE_URL or the required key is missing."""

    def __init__(self, key_name: str = "SUPABASE_ANON_KEY"):
        super().__init__(
            message="Supabase is not configured.",
            code="SUPABASE_NOT_CONFIGURED",
            suggestion=f"Set SUPABASE_URL and {key_name} in your .env file",
        )


class SupabaseClient:
    """
    Typed wrapper for Supabase database operations.

    Implements singleton pattern - one client instance is shared across
    the application. All methods are class methods for easy access without
    instantiation.

    Example:
        # All programs ordered by name
        programs = SupabaseClient.fetch_rows("programs", order="name")

        # Modules for one program
        modules = SupabaseClient.fetch_rows(
            "training_modules",
            filters={"program_id": program["id"]},
            order="sort_order",
        )
    """

    _instance: Client | None = None
    _service_instance: Client | None = None

    @classmethod
    def get_client(cls) -> Client:
        """
        Get or create the singleton anon-key Supabase client.

        Row Level Security must allow reads with the anon key for the
        content tables.

        Raises:
            SupabaseClientError: If client creation fails
        """
        if cls._instance is None:
            if not settings.supabase_configured:
                raise SupabaseNotConfigured()
            try:
                cls._instance = create_client(settings.SUPABASE_URL, settings.SUPABASE_ANON_KEY)
                logger.info("Supabase client initialized successfully")
            except Exception as e:
                raise SupabaseClientError(
                    message=f"Failed to create Supabase client: {e}",
                    code="CLIENT_INIT_FAILED",
                    suggestion="Check SUPABASE_URL and SUPABASE_ANON_KEY in your .env file"
                )
        return cls._instance

    @classmethod
    def get_service_client(cls) -> Client:
        """
        Get or create the service_role client.

        Used by the attachment migration, which writes to Storage.
        """
        if cls._service_instance is None:
            if not (settings.SUPABASE_URL and settings.SUPABASE_SERVICE_KEY):
                raise SupabaseNotConfigured("SUPABASE_SERVICE_KEY")
            try:
                cls._service_instance = create_client(settings.SUPABASE_URL, settings.SUPABASE_SERVICE_KEY)
                logger.info("Supabase service client initialized successfully")
            except Exception as e:
                raise SupabaseClientError(
                    message=f"Failed to create Supabase service client: {e}",
                    code="CLIENT_INIT_FAILED",
                    suggestion="Check SUPABASE_URL and SUPABASE_SERVICE_KEY in your .env file"
                )
        return cls._service_instance

    @classmethod
    def reset(cls) -> None:
        """Drop cached clients (tests, credential changes)."""
        cls._instance = None
        cls._service_instance = None

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    @classmethod
    def fetch_rows(
        cls,
        table: str,
        filters: dict[str, Any] | None = None,
        order: str | None = None,
        desc: bool = False,
        limit: int | None = None,
        columns: str = "*",
    ) -> list[dict[str, Any]]:
        """
        Fetch rows from a table with equality filters.

        Args:
            table: Table name
            filters: Column -> value equality filters
            order: Column to order by
            desc: Descending order when True
            limit: Maximum number of rows
            columns: Select clause (default "*")

        Returns:
            List of row dicts (empty when none match)

        Raises:
            SupabaseClientError: If the query fails
        """
        client = cls.get_client()

        try:
            query = client.table(table).select(columns)
            for column, value in (filters or {}).items():
                query = query.eq(column, value)
            if order:
                query = query.order(order, desc=desc)
            if limit:
                query = query.limit(limit)

            response = query.execute()
            rows = response.data or []
            logger.debug(f"Fetched {len(rows)} rows from {table}")
            return rows

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to fetch {table}: {e}",
                code="FETCH_ROWS_FAILED",
                suggestion=f"Check that the {table} table exists and RLS allows anon reads",
                details={"table": table, "filters": filters or {}},
            )

    @classmethod
    def fetch_one(cls, table: str, filters: dict[str, Any]) -> dict[str, Any] | None:
        """First row matching the filters, or None."""
        rows = cls.fetch_rows(table, filters=filters, limit=1)
        return rows[0] if rows else None

    @classmethod
    def ping(cls) -> None:
        """Cheap reachability check used by the readiness probe."""
        client = cls.get_client()
        client.table("programs").select("id").limit(1).execute()
