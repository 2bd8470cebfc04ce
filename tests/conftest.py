# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# This module provides pytest fixtures and configuration for all tests.
#
# Key features:
# - Sets up mock environment variables before any imports
# - Provides Airtable record fixtures and an httpx mock-transport factory
# - Provides a TestClient and auth headers for the demo member
# =============================================================================

import os

# =============================================================================
# Set up test environment BEFORE any imports
# =============================================================================
# This must happen before importing app.config which loads settings immediately

os.environ.setdefault("AIRTABLE_API_KEY", "pat-test-token-1234")
os.environ.setdefault("AIRTABLE_BASE_ID", "appTestBase")
os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_ANON_KEY", "test-anon-key")
os.environ.setdefault("SUPABASE_SERVICE_KEY", "test-service-key")
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-session-tokens")
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("DEBUG", "true")

from typing import Callable

import httpx
import pytest


# =============================================================================
# Airtable fixtures
# =============================================================================

class Recorder:
    """Collects sleep() calls so retry waits can be asserted without waiting."""

    def __init__(self):
        self.calls: list[float] = []

    def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


class NoopLimiter:
    """Rate limiter stand-in that never waits."""

    def acquire(self) -> float:
        return 0.0

    def reset(self) -> None:
        pass


@pytest.fixture
def sleeps() -> Recorder:
    return Recorder()


@pytest.fixture
def make_airtable_client(sleeps):
    """
    Build an AirtableClient whose HTTP layer is an httpx.MockTransport.

    Usage:
        client, requests = make_airtable_client(handler)
    """
    from lib.airtable_client import AirtableClient

    def factory(handler: Callable[[httpx.Request], httpx.Response], **kwargs):
        seen: list[httpx.Request] = []

        def recording_handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return handler(request)

        http = httpx.Client(transport=httpx.MockTransport(recording_handler))
        kwargs.setdefault("rate_limiter", NoopLimiter())
        kwargs.setdefault("sleep", sleeps)
        client = AirtableClient(
            api_key="pat-test-token-1234",
            base_id="appTestBase",
            api_url="https://api.airtable.test/v0",
            http_client=http,
            **kwargs,
        )
        return client, seen

    return factory


@pytest.fixture
def program_records():
    """ClinicalPrograms records as Airtable returns them."""
    return [
        {
            "id": "recProg1",
            "createdTime": "2024-01-15T10:00:00.000Z",
            "fields": {
                "programName": "TimeMyMeds",
                "programDescription": "Appointment-based medication synchronization",
                "programSlug": "timemymeds",
                "experienceLevel": {"name": "Beginner"},
                "programOverview": "Sync every refill.\n\nSee patients monthly.\r\nBill for it.",
            },
        },
        {
            "id": "recProg2",
            "createdTime": "2024-01-15T10:00:00.000Z",
            "fields": {
                "programName": "Test & Treat",
                "programDescription": "CLIA-waived testing",
                "programSlug": "test-treat",
            },
        },
    ]


@pytest.fixture
def attachment():
    def build(filename: str = "guide.pdf", url: str | None = None, **extra):
        data = {
            "id": f"att{filename}",
            "url": url or f"https://dl.airtable.test/{filename}",
            "filename": filename,
            "type": "application/pdf",
            "size": 2048,
        }
        data.update(extra)
        return data

    return build


# =============================================================================
# API fixtures
# =============================================================================

@pytest.fixture
def client():
    """TestClient with dependency overrides cleared afterwards."""
    from fastapi.testclient import TestClient

    from app.main import app

    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def demo_token():
    from app.auth import auth_store
    from app.auth.dependencies import create_access_token

    return create_access_token(auth_store.demo_user())


@pytest.fixture
def auth_headers(demo_token):
    return {"Authorization": f"Bearer {demo_token}"}


@pytest.fixture(autouse=True)
def reset_process_state():
    """Clear the in-memory member store and any credential override between tests."""
    yield
    from core.services.member_service import activity_store
    from lib.airtable_client import clear_credential_override

    activity_store.clear()
    clear_credential_override()
