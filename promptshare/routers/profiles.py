"""Profile route handlers."""

from typing import Any, cast

from fastapi import APIRouter, Depends, HTTPException, status

from promptshare.auth import get_optional_user_id
from promptshare.schemas.profiles import ProfileResponse
from promptshare.schemas.prompts import PromptListItem
from promptshare.services.prompts import list_prompts
from promptshare.supabase_client import get_supabase_client

router = APIRouter(prefix="/api/profiles", tags=["profiles"])

_PROFILE_COLUMNS = "id, username, display_name, avatar_url, created_at"


@router.get("/{user_id}", response_model=ProfileResponse)
async def get_profile(user_id: str) -> dict[str, Any]:
    """Return a user's public profile.

    Raises:
        HTTPException: 404 if the profile does not exist.
    """
    client = get_supabase_client()
    result = client.table("profiles").select(_PROFILE_COLUMNS).eq("id", user_id).execute()
    rows = cast(list[dict[str, Any]], result.data)
    if not rows:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Profile not found",
        )
    return rows[0]


@router.get("/{user_id}/prompts", response_model=list[PromptListItem])
async def list_user_prompts(
    user_id: str,
    viewer_id: str | None = Depends(get_optional_user_id),
) -> list[dict[str, Any]]:
    """Return the prompts a user has posted, newest first."""
    client = get_supabase_client()
    return list_prompts(client, user_id=user_id, viewer_id=viewer_id)
