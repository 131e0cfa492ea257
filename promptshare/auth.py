"""JWT verification dependencies for Supabase auth."""

from __future__ import annotations

import logging
from typing import Any, cast

import jwt
from fastapi import Header, HTTPException, status

from promptshare.config import get_settings
from promptshare.supabase_client import get_supabase_client

logger = logging.getLogger(__name__)


def _decode_token(authorization: str) -> dict[str, Any]:
    """Verify a bearer token and return its claims.

    Raises:
        HTTPException: 500 if the JWT secret is missing, 401 on a malformed
            header or an invalid, expired or subject-less token.
    """
    settings = get_settings()

    if not settings.supabase_jwt_secret:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="SUPABASE_JWT_SECRET not configured",
        )

    if not authorization.startswith("Bearer "):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authorization header format",
        )

    token = authorization.removeprefix("Bearer ")

    try:
        payload = jwt.decode(
            token,
            settings.supabase_jwt_secret,
            algorithms=["HS256"],
            audience="authenticated",
        )
    except jwt.ExpiredSignatureError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token has expired",
        )
    except jwt.InvalidTokenError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
        )

    if not payload.get("sub"):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token missing sub claim",
        )
    return cast(dict[str, Any], payload)


async def get_current_user_id(
    authorization: str = Header(...),
) -> str:
    """Extract and verify the JWT from the Authorization header.

    Decodes the Supabase JWT and makes sure the user has a row in the
    profiles table, creating one from the token's user metadata if needed.

    Args:
        authorization: Bearer token from the Authorization header.

    Returns:
        The auth user's UUID, which is also the profile ID.

    Raises:
        HTTPException: 401 on invalid, expired, or missing token.
    """
    payload = _decode_token(authorization)
    user_id = str(payload["sub"])
    _sync_profile(
        user_id=user_id,
        email=payload.get("email"),
        metadata=payload.get("user_metadata") or {},
    )
    return user_id


async def get_optional_user_id(
    authorization: str | None = Header(default=None),
) -> str | None:
    """Like ``get_current_user_id`` but returns None for anonymous viewers.

    A header that is present but invalid is still rejected with 401.
    """
    if authorization is None:
        return None
    payload = _decode_token(authorization)
    return str(payload["sub"])


def _sync_profile(
    *, user_id: str, email: str | None, metadata: dict[str, Any]
) -> None:
    """Create the user's profile row on first sight.

    Args:
        user_id: Auth user UUID.
        email: Email claim, used as a username fallback.
        metadata: ``user_metadata`` claim from the identity provider.
    """
    client = get_supabase_client()

    result = client.table("profiles").select("id").eq("id", user_id).execute()
    if result.data:
        return

    username = (
        metadata.get("username")
        or metadata.get("preferred_username")
        or (email.split("@")[0] if email else None)
    )
    display_name = (
        metadata.get("name") or metadata.get("full_name") or metadata.get("username")
    )
    avatar_url = metadata.get("avatar_url") or metadata.get("picture")

    client.table("profiles").insert(
        {
            "id": user_id,
            "username": username or None,
            "display_name": display_name or None,
            "avatar_url": avatar_url or None,
        }
    ).execute()
    logger.info("Created profile for user %s (%s)", user_id, username)
