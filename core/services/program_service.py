# =============================================================================
# core/services/program_service.py - Program Catalog (Supabase)
# =============================================================================
# Reads the Supabase mirror of the program tables:
#   programs -> training_modules / protocol_manuals / documentation_forms /
#               additional_resources (joined on program_id)
#
# Child rows carry a storage path; public URLs are built from SUPABASE_URL
# and the `clinical-programs` bucket.
# =============================================================================

import logging
from typing import Any, TypeVar

from app.config import settings
from app.exceptions import SupabaseNotConfiguredError, UpstreamServiceError
from core.content import FALLBACK_PROGRAM_META
from core.models.program import (
    AdditionalResource,
    DocumentationForm,
    Program,
    ProgramBundle,
    ProgramFile,
    ProgramMeta,
    ProtocolManual,
    TrainingModule,
)
from lib.supabase_client import SupabaseClient, SupabaseClientError, SupabaseNotConfigured

logger = logging.getLogger(__name__)

PROGRAMS_BUCKET = "clinical-programs"
LIBRARY_BUCKET = "resource-library"

F = TypeVar("F", bound=ProgramFile)


def public_url(bucket: str, path: str | None) -> str:
    """
    Public Storage URL for an object.

    Returns "" when Supabase is not configured or there is no path.
    """
    base = settings.SUPABASE_URL.rstrip("/")
    if not base or not path:
        return ""
    return f"{base}/storage/v1/object/public/{bucket}/{path.lstrip('/')}"


def fetch(table: str, **kwargs: Any) -> list[dict[str, Any]]:
    """
    SupabaseClient.fetch_rows with library errors mapped to API errors.

    Shared by the program and library services.
    """
    try:
        return SupabaseClient.fetch_rows(table, **kwargs)
    except SupabaseNotConfigured:
        raise SupabaseNotConfiguredError()
    except SupabaseClientError as e:
        logger.error(f"Supabase query on {table} failed: {e}")
        raise UpstreamServiceError("supabase")


class ProgramService:
    """Service for program rows and their child tables."""

    @staticmethod
    def get_all() -> list[Program]:
        """All programs ordered by name."""
        rows = fetch("programs", order="name")
        return [Program(**row) for row in rows]

    @staticmethod
    def get_by_slug(slug: str) -> Program | None:
        rows = fetch("programs", filters={"slug": slug}, limit=1)
        return Program(**rows[0]) if rows else None

    @staticmethod
    def _children(table: str, model: type[F], program_id: str, order: str = "name") -> list[F]:
        rows = fetch(table, filters={"program_id": program_id}, order=order)
        items = []
        for row in rows:
            item = model(**row)
            item.file_url = public_url(PROGRAMS_BUCKET, item.file_path) or None
            items.append(item)
        return items

    @classmethod
    def get_program_detail(cls, slug: str) -> ProgramBundle | None:
        """
        A program with all of its child rows.

        Args:
            slug: Program slug

        Returns:
            ProgramBundle, or None if the slug is unknown

        Raises:
            SupabaseNotConfiguredError: If Supabase credentials are missing
            UpstreamServiceError: If a query fails
        """
        program = cls.get_by_slug(slug)
        if program is None:
            logger.info(f"Program not found in Supabase: {slug}")
            return None

        return ProgramBundle(
            program=program,
            modules=cls._children("training_modules", TrainingModule, program.id, order="sort_order"),
            manuals=cls._children("protocol_manuals", ProtocolManual, program.id),
            forms=cls._children("documentation_forms", DocumentationForm, program.id),
            resources=cls._children("additional_resources", AdditionalResource, program.id),
        )

    @staticmethod
    def get_meta(slug: str, program: Program | None = None) -> ProgramMeta | None:
        """
        Header metadata for a program page.

        The table row wins; known slugs fall back to static copy.
        """
        if program is not None:
            return ProgramMeta(name=program.name, description=program.description, overview=program.overview)
        return FALLBACK_PROGRAM_META.get(slug)
