"""Auth dependency and endpoint tests.

Tests JWT verification with PyJWT: valid, expired, invalid, and missing tokens,
plus first-login profile creation.
"""

import time
from typing import Any
from unittest.mock import MagicMock, patch

import jwt
from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient

from promptshare.auth import get_current_user_id, get_optional_user_id
from promptshare.main import app as main_app
from tests.conftest import MOCK_USER_ID

JWT_SECRET = "test-jwt-secret-for-testing-only-0123456789"
USER_UUID = "7f3c1a52-9d0e-4b8a-a1f2-5c6d7e8f9a0b"


def _make_token(
    *,
    sub: str | None = USER_UUID,
    email: str = "ada@example.com",
    user_metadata: dict[str, Any] | None = None,
    expired: bool = False,
    audience: str = "authenticated",
) -> str:
    """Create a JWT token for testing."""
    now = int(time.time())
    payload: dict[str, Any] = {
        "email": email,
        "aud": audience,
        "iat": now,
        "exp": now - 100 if expired else now + 3600,
        "user_metadata": user_metadata or {},
    }
    if sub is not None:
        payload["sub"] = sub
    return jwt.encode(payload, JWT_SECRET, algorithm="HS256")


def _make_mock_settings(secret: str = JWT_SECRET) -> MagicMock:
    """Build mock settings with JWT secret."""
    settings = MagicMock()
    settings.supabase_jwt_secret = secret
    return settings


def _make_mock_client(existing_profile: bool) -> tuple[MagicMock, MagicMock]:
    """Build a mock Supabase client for profile sync.

    Returns:
        The client mock and the profiles table mock.
    """
    mock_profiles_table = MagicMock()
    # select(id).eq(id).execute() -> existing profile lookup
    mock_profiles_table.select.return_value.eq.return_value.execute.return_value = (
        MagicMock(data=[{"id": USER_UUID}] if existing_profile else [])
    )

    mock_client = MagicMock()
    mock_client.table.return_value = mock_profiles_table
    return mock_client, mock_profiles_table


def _build_test_app() -> FastAPI:
    """Create a minimal FastAPI app with protected and optional endpoints."""
    test_app = FastAPI()

    @test_app.get("/protected")
    async def protected_endpoint(
        user_id: str = Depends(get_current_user_id),
    ) -> dict[str, str]:
        return {"user_id": user_id}

    @test_app.get("/optional")
    async def optional_endpoint(
        user_id: str | None = Depends(get_optional_user_id),
    ) -> dict[str, str | None]:
        return {"user_id": user_id}

    return test_app


def _bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@patch("promptshare.auth.get_settings")
@patch("promptshare.auth.get_supabase_client")
def test_valid_token_returns_user_id(
    mock_get_client: MagicMock,
    mock_get_settings: MagicMock,
) -> None:
    """Valid JWT with an existing profile returns the sub claim unchanged."""
    mock_get_settings.return_value = _make_mock_settings()
    mock_client, profiles_table = _make_mock_client(existing_profile=True)
    mock_get_client.return_value = mock_client

    client = TestClient(_build_test_app())
    response = client.get("/protected", headers=_bearer(_make_token()))

    assert response.status_code == 200
    assert response.json() == {"user_id": USER_UUID}
    profiles_table.insert.assert_not_called()


@patch("promptshare.auth.get_settings")
@patch("promptshare.auth.get_supabase_client")
def test_first_login_creates_profile(
    mock_get_client: MagicMock,
    mock_get_settings: MagicMock,
) -> None:
    """Valid JWT with no profile inserts one from the user metadata."""
    mock_get_settings.return_value = _make_mock_settings()
    mock_client, profiles_table = _make_mock_client(existing_profile=False)
    mock_get_client.return_value = mock_client

    token = _make_token(
        user_metadata={
            "full_name": "Ada Lovelace",
            "preferred_username": "ada",
            "picture": "https://example.com/ada.png",
        }
    )
    client = TestClient(_build_test_app())
    response = client.get("/protected", headers=_bearer(token))

    assert response.status_code == 200
    profiles_table.insert.assert_called_once_with(
        {
            "id": USER_UUID,
            "username": "ada",
            "display_name": "Ada Lovelace",
            "avatar_url": "https://example.com/ada.png",
        }
    )


@patch("promptshare.auth.get_settings")
@patch("promptshare.auth.get_supabase_client")
def test_first_login_without_metadata_uses_email(
    mock_get_client: MagicMock,
    mock_get_settings: MagicMock,
) -> None:
    mock_get_settings.return_value = _make_mock_settings()
    mock_client, profiles_table = _make_mock_client(existing_profile=False)
    mock_get_client.return_value = mock_client

    client = TestClient(_build_test_app())
    response = client.get("/protected", headers=_bearer(_make_token()))

    assert response.status_code == 200
    inserted = profiles_table.insert.call_args.args[0]
    assert inserted["username"] == "ada"
    assert inserted["display_name"] is None
    assert inserted["avatar_url"] is None


@patch("promptshare.auth.get_settings")
def test_expired_token_returns_401(
    mock_get_settings: MagicMock,
) -> None:
    """Expired JWT returns 401."""
    mock_get_settings.return_value = _make_mock_settings()

    client = TestClient(_build_test_app())
    response = client.get("/protected", headers=_bearer(_make_token(expired=True)))

    assert response.status_code == 401
    assert "expired" in response.json()["detail"].lower()


@patch("promptshare.auth.get_settings")
def test_invalid_token_returns_401(
    mock_get_settings: MagicMock,
) -> None:
    """Malformed JWT returns 401."""
    mock_get_settings.return_value = _make_mock_settings()

    client = TestClient(_build_test_app())
    response = client.get("/protected", headers=_bearer("not-a-valid-jwt"))

    assert response.status_code == 401
    assert "invalid" in response.json()["detail"].lower()


@patch("promptshare.auth.get_settings")
def test_wrong_audience_returns_401(
    mock_get_settings: MagicMock,
) -> None:
    mock_get_settings.return_value = _make_mock_settings()

    client = TestClient(_build_test_app())
    response = client.get(
        "/protected", headers=_bearer(_make_token(audience="anon"))
    )

    assert response.status_code == 401


def test_missing_auth_header_returns_422() -> None:
    """Missing Authorization header returns 422 (FastAPI validation)."""
    client = TestClient(_build_test_app())
    response = client.get("/protected")
    assert response.status_code == 422


@patch("promptshare.auth.get_settings")
def test_invalid_header_format_returns_401(
    mock_get_settings: MagicMock,
) -> None:
    """Authorization header without 'Bearer ' prefix returns 401."""
    mock_get_settings.return_value = _make_mock_settings()

    client = TestClient(_build_test_app())
    response = client.get("/protected", headers={"Authorization": "Token some-token"})

    assert response.status_code == 401
    assert "format" in response.json()["detail"].lower()


@patch("promptshare.auth.get_settings")
def test_token_missing_sub_returns_401(
    mock_get_settings: MagicMock,
) -> None:
    """JWT without a sub claim returns 401."""
    mock_get_settings.return_value = _make_mock_settings()

    client = TestClient(_build_test_app())
    response = client.get("/protected", headers=_bearer(_make_token(sub=None)))

    assert response.status_code == 401
    assert "sub" in response.json()["detail"].lower()


@patch("promptshare.auth.get_settings")
def test_missing_jwt_secret_returns_500(
    mock_get_settings: MagicMock,
) -> None:
    mock_get_settings.return_value = _make_mock_settings(secret="")

    client = TestClient(_build_test_app())
    response = client.get("/protected", headers=_bearer(_make_token()))

    assert response.status_code == 500


# --- Optional auth ---


def test_optional_auth_without_header_is_anonymous() -> None:
    client = TestClient(_build_test_app())
    response = client.get("/optional")
    assert response.status_code == 200
    assert response.json() == {"user_id": None}


@patch("promptshare.auth.get_settings")
@patch("promptshare.auth.get_supabase_client")
def test_optional_auth_with_token_skips_profile_sync(
    mock_get_client: MagicMock,
    mock_get_settings: MagicMock,
) -> None:
    mock_get_settings.return_value = _make_mock_settings()

    client = TestClient(_build_test_app())
    response = client.get("/optional", headers=_bearer(_make_token()))

    assert response.status_code == 200
    assert response.json() == {"user_id": USER_UUID}
    mock_get_client.assert_not_called()


@patch("promptshare.auth.get_settings")
def test_optional_auth_rejects_bad_token(
    mock_get_settings: MagicMock,
) -> None:
    mock_get_settings.return_value = _make_mock_settings()

    client = TestClient(_build_test_app())
    response = client.get("/optional", headers=_bearer(_make_token(expired=True)))

    assert response.status_code == 401


# --- GET /api/auth/me ---


@patch("promptshare.routers.auth.get_supabase_client")
def test_me_returns_profile(mock_get_client: MagicMock) -> None:
    profile = {
        "id": MOCK_USER_ID,
        "username": "ada",
        "display_name": "Ada",
        "avatar_url": None,
        "created_at": "2026-09-01T08:00:00+00:00",
    }
    mock_client = MagicMock()
    mock_client.table.return_value.select.return_value.eq.return_value.execute.return_value = MagicMock(
        data=[profile]
    )
    mock_get_client.return_value = mock_client

    response = TestClient(main_app).get("/api/auth/me")

    assert response.status_code == 200
    assert response.json()["username"] == "ada"
    mock_client.table.return_value.select.return_value.eq.assert_called_once_with(
        "id", MOCK_USER_ID
    )
