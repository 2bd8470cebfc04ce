# =============================================================================
# lib/ - Standalone Utility Modules
# =============================================================================
# This package contains reusable clients and helpers:
# - airtable_client.py: Rate-limited Airtable REST client with retries
# - airtable_schema.py: Airtable table names, IDs and field IDs
# - cell_values.py: Coercion of Airtable cell values (selects, attachments)
# - supabase_client.py: Typed Supabase wrapper for database operations
# - utils.py: Shared utilities (error base class, masking, timestamps)
#
# These modules are self-contained and can be tested in isolation.
# =============================================================================

from lib.airtable_client import AirtableClient, AirtableClientError, AirtableNotConfigured
from lib.supabase_client import SupabaseClient, SupabaseClientError
from lib.utils import ApplicationError, mask_secret, utc_now_iso

__all__ = [
    # Airtable
    "AirtableClient",
    "AirtableClientError",
    "AirtableNotConfigured",
    # Supabase
    "SupabaseClient",
    "SupabaseClientError",
    # Utils
    "ApplicationError",
    "mask_secret",
    "utc_now_iso",
]
