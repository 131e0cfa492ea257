"""Authentication route handlers."""

from typing import Any, cast

from fastapi import APIRouter, Depends

from promptshare.auth import get_current_user_id
from promptshare.schemas.profiles import ProfileResponse
from promptshare.supabase_client import get_supabase_client

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.get("/me", response_model=ProfileResponse)
async def get_me(user_id: str = Depends(get_current_user_id)) -> dict[str, Any]:
    """Return the current authenticated user's profile.

    Args:
        user_id: Injected by the JWT auth dependency.

    Returns:
        The profile row from the database.
    """
    client = get_supabase_client()
    result = client.table("profiles").select("*").eq("id", user_id).execute()
    rows = cast(list[dict[str, Any]], result.data)
    return rows[0]
