"""Pytest configuration and fixtures."""

import os
from collections.abc import Callable, Generator
from typing import Any
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from fakes import FakeSupabaseStore
from helpers import TEST_PUBLIC_JWK, USER_A_ID, create_test_token

# Set test environment variables before importing application modules
os.environ["APP_ENV"] = "test"
os.environ["DEBUG"] = "true"
os.environ["LOG_LEVEL"] = "DEBUG"
os.environ["SUPABASE_URL"] = "https://test-project.supabase.co"
os.environ["SUPABASE_SECRET_KEY"] = "test-secret-key"
os.environ["SUPABASE_SIGNING_KEY_JWK"] = TEST_PUBLIC_JWK

SUPABASE_CLIENT_IMPORTS = (
    "src.core.supabase",
    "src.services.membership_service",
    "src.services.profile_service",
    "src.services.partner_service",
)


@pytest.fixture(autouse=True)
def clear_cached_settings() -> Generator[None, None, None]:
    """Reload settings and the signing key for every test."""
    from src.api.middleware.auth import get_signing_key
    from src.core.config import get_settings

    get_settings.cache_clear()
    get_signing_key.cache_clear()
    yield
    get_settings.cache_clear()
    get_signing_key.cache_clear()


@pytest.fixture
def test_settings() -> Any:
    """Provide test settings.

    Returns:
        Settings: Test configuration settings.
    """
    from src.core.config import get_settings

    return get_settings()


@pytest.fixture
def fake_store() -> Generator[FakeSupabaseStore, None, None]:
    """Replace the Supabase client everywhere with an in-memory store.

    Yields:
        FakeSupabaseStore: The store backing every service.
    """
    store = FakeSupabaseStore()
    patchers = [patch(f"{module}.get_supabase_client", return_value=store) for module in SUPABASE_CLIENT_IMPORTS]
    for patcher in patchers:
        patcher.start()
    yield store
    for patcher in reversed(patchers):
        patcher.stop()


@pytest.fixture
def client(fake_store: FakeSupabaseStore) -> Generator[TestClient, None, None]:
    """Provide a test client for the FastAPI application.

    Args:
        fake_store: In-memory Supabase store fixture.

    Yields:
        TestClient: FastAPI test client.
    """
    from src.main import app

    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def auth_headers() -> Callable[..., dict[str, str]]:
    """Build Authorization headers for a test user."""

    def _headers(sub: str = USER_A_ID, **kwargs: Any) -> dict[str, str]:
        return {"Authorization": f"Bearer {create_test_token(sub=sub, **kwargs)}"}

    return _headers
