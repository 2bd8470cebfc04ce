# =============================================================================
# tests/ - Test Suite
# =============================================================================
# This package contains all tests for the ClinicalRxQ site:
# - test_airtable_client.py: retry policy, spacing, paging, credentials
# - test_*_service.py: service logic with mocked Airtable / Supabase
# - test_routes.py: API endpoints and HTML pages via TestClient
# - test_migrate_script.py: the attachment migration CLI
#
# Run tests with: pytest
# =============================================================================
