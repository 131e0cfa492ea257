"""Shared test fixtures.

Provides global auth dependency overrides so protected endpoints
can be tested without real JWT tokens.
"""

from collections.abc import Iterator

import pytest

from promptshare.auth import get_current_user_id, get_optional_user_id
from promptshare.config import get_settings
from promptshare.main import app

MOCK_USER_ID = "11111111-1111-1111-1111-111111111111"


async def _mock_get_current_user_id() -> str:
    """Return a fixed user ID for testing."""
    return MOCK_USER_ID


async def _mock_get_optional_user_id() -> str | None:
    return MOCK_USER_ID


async def _anonymous() -> None:
    return None


@pytest.fixture(autouse=True)
def override_auth_dependency() -> Iterator[None]:
    """Override the auth dependencies for all tests.

    Tests in test_auth.py that need real JWT behavior should
    create their own FastAPI app instance instead of using the global app.
    """
    app.dependency_overrides[get_current_user_id] = _mock_get_current_user_id
    app.dependency_overrides[get_optional_user_id] = _mock_get_optional_user_id
    yield
    app.dependency_overrides.pop(get_current_user_id, None)
    app.dependency_overrides.pop(get_optional_user_id, None)


@pytest.fixture
def anonymous_viewer() -> None:
    """Make optional-auth endpoints see an anonymous viewer."""
    app.dependency_overrides[get_optional_user_id] = _anonymous


@pytest.fixture
def fresh_settings() -> Iterator[None]:
    """Drop cached settings before and after a test that changes the env."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
