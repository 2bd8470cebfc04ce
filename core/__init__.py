# =============================================================================
# core/ - Business Logic Package
# =============================================================================
# This package contains the site's business logic:
# - models/: Pydantic schemas for data validation
# - services/: Airtable / Supabase reads, storage, migration, member data
# - content.py: Static marketing copy and dashboard demo data
#
# Services raise app.exceptions errors but never touch requests or
# responses, so they can be tested without a running app.
# =============================================================================
